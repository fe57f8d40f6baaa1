"""Gateway interfaces - all side effects of a flow go here.

Each external capability has an abstract interface, a real implementation
and a Mock that records calls for tests.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import typer
import yaml
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class PersistenceGateway(ABC):
    """Interface for persistent key-value storage."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for key, or default when absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store a date, string or boolean value under key."""
        pass


class YamlPersistenceGateway(PersistenceGateway):
    """Real implementation - keeps values in a YAML file."""

    def __init__(self, path: Union[str, Path]):
        """Initialize with the path of the store file.

        Args:
            path: YAML file to read and write (created on first write)
        """
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Store file {self.path} must contain a mapping")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic replace
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w') as f:
            yaml.safe_dump(data, f, sort_keys=True)
        os.replace(tmp_path, self.path)
        logger.debug("Persisted %s to %s", key, self.path)


class MockPersistenceGateway(PersistenceGateway):
    """Mock for testing - in-memory store that records calls."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(data or {})
        self.calls = []

    def get(self, key: str, default: Any = None) -> Any:
        self.calls.append(('get', key))
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.calls.append(('set', key, value))
        self.data[key] = value

    def writes(self) -> List[tuple]:
        """Return only the recorded set calls."""
        return [c for c in self.calls if c[0] == 'set']


class NotificationGateway(ABC):
    """Interface for notification permission and daily reminders."""

    @abstractmethod
    def request_permission(self) -> bool:
        """Ask the user for notification permission.

        Returns:
            True if granted
        """
        pass

    @abstractmethod
    def schedule_daily_reminder(self, hour: int, minute: int, title: str, body: str) -> None:
        """Schedule a repeating daily reminder at hour:minute."""
        pass


class ConsoleNotificationGateway(NotificationGateway):
    """Real implementation for terminals - asks on stdin, reports on stdout."""

    def __init__(self, answer: Optional[bool] = None):
        """Initialize the gateway.

        Args:
            answer: Fixed permission answer for headless runs (None asks the user)
        """
        self.answer = answer

    def request_permission(self) -> bool:
        if self.answer is not None:
            typer.echo(f"Notification permission {'granted' if self.answer else 'denied'}")
            return self.answer
        return typer.confirm("Allow daily dream journal reminders?", default=True)

    def schedule_daily_reminder(self, hour: int, minute: int, title: str, body: str) -> None:
        typer.echo(f"{title} scheduled daily at {hour:02d}:{minute:02d}")
        typer.echo(f"  {body}")


class MockNotificationGateway(NotificationGateway):
    """Mock for testing - records calls."""

    def __init__(self, granted: bool = True):
        self.calls = []
        self.responses = {'request_permission': granted}

    def request_permission(self) -> bool:
        self.calls.append(('request_permission',))
        return self.responses.get('request_permission', False)

    def schedule_daily_reminder(self, hour: int, minute: int, title: str, body: str) -> None:
        self.calls.append(('schedule_daily_reminder', hour, minute, title, body))


class Product(BaseModel):
    """A subscription product from the store catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    display_price: str
    price: float


class PurchaseCapability(ABC):
    """Interface for the platform store."""

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[Product]:
        """Return the catalog product with this id, or None."""
        pass

    @abstractmethod
    def purchase(self, product: Product) -> bool:
        """Buy a product.

        Returns:
            True when the purchase went through, False when cancelled or pending

        Raises:
            PurchaseError: If the store reports a failure
        """
        pass


class MockPurchaseCapability(PurchaseCapability):
    """Mock for testing - fixed catalog, scripted purchase responses.

    Set responses['purchase'] to a bool, or to an exception instance to
    have purchase() raise it.
    """

    def __init__(self, products: Optional[List[Product]] = None):
        self.calls = []
        self.products = {p.id: p for p in products or []}
        self.responses: Dict[str, Any] = {'purchase': True}

    def get_product(self, product_id: str) -> Optional[Product]:
        self.calls.append(('get_product', product_id))
        return self.products.get(product_id)

    def purchase(self, product: Product) -> bool:
        self.calls.append(('purchase', product.id))
        response = self.responses.get('purchase', True)
        if isinstance(response, Exception):
            raise response
        return bool(response)


__all__ = [
    'PersistenceGateway',
    'YamlPersistenceGateway',
    'MockPersistenceGateway',
    'NotificationGateway',
    'ConsoleNotificationGateway',
    'MockNotificationGateway',
    'Product',
    'PurchaseCapability',
    'MockPurchaseCapability',
]
