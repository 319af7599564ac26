"""Interface for presenting call results to the user.

Defines the contract for displaying data, errors and informational
messages, allowing different UI implementations (console, tests).
"""

import abc
from typing import Any

from apishield.domain.models.common import JsonData
from apishield.domain.models.errors import ClassifiedError


class UserInterface(abc.ABC):
    """Abstract Base Class for user interaction."""

    @abc.abstractmethod
    def display_data(self, data: JsonData, **kwargs: Any) -> None:
        """Displays the data a successful call resolved with.

        Args:
            data: Parsed response data.
            **kwargs: Additional arguments for formatting (e.g. title).
        """
        pass

    @abc.abstractmethod
    def display_api_error(self, error: ClassifiedError, **kwargs: Any) -> None:
        """Displays a classified error using its fixed, user-facing message."""
        pass

    @abc.abstractmethod
    def display_error(self, error_message: str, **kwargs: Any) -> None:
        """Displays a free-form error message (CLI usage problems etc.)."""
        pass

    @abc.abstractmethod
    def display_info(self, info_message: str, **kwargs: Any) -> None:
        """Displays an informational message to the user."""
        pass

    @abc.abstractmethod
    def display_table(self, title: str, columns: list, rows: list) -> None:
        """Displays tabular data.

        Args:
            title: Table title.
            columns: Column headers.
            rows: Sequence of row tuples, one value per column.
        """
        pass
