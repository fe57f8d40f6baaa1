"""Flow engine - core infrastructure for data-driven guided flows."""

from .controller import FlowController, Phase, DEFAULT_SUBMISSION_DELAY
from .errors import (
    DreamWizardError,
    OutOfRangeError,
    InvalidStateError,
    InternalInvariantError,
    PurchaseError,
)
from .gateways import (
    PersistenceGateway,
    YamlPersistenceGateway,
    MockPersistenceGateway,
    NotificationGateway,
    ConsoleNotificationGateway,
    MockNotificationGateway,
    Product,
    PurchaseCapability,
    MockPurchaseCapability,
)
from .loader import SpecLoader
from .scheduler import Scheduler, ScheduledTask, ThreadingScheduler, ManualScheduler
from .schema import Step, StepKind, StepOption, FlowSpec
from .sequence import StepSequence

__all__ = [
    'FlowController',
    'Phase',
    'DEFAULT_SUBMISSION_DELAY',
    'DreamWizardError',
    'OutOfRangeError',
    'InvalidStateError',
    'InternalInvariantError',
    'PurchaseError',
    'PersistenceGateway',
    'YamlPersistenceGateway',
    'MockPersistenceGateway',
    'NotificationGateway',
    'ConsoleNotificationGateway',
    'MockNotificationGateway',
    'Product',
    'PurchaseCapability',
    'MockPurchaseCapability',
    'SpecLoader',
    'Scheduler',
    'ScheduledTask',
    'ThreadingScheduler',
    'ManualScheduler',
    'Step',
    'StepKind',
    'StepOption',
    'FlowSpec',
    'StepSequence',
]
