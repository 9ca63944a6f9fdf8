# Domain models shared by the services, clients and API routes

from safetrip.models.destination import Destination, DestinationStatus
from safetrip.models.alert import Alert, Severity
from safetrip.models.notification import Notification, NotificationType
from safetrip.models.subscription import SubscriptionStatus, TrialStatus, PeriodType
