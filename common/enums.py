from django.db import models


class BaseEnum(models.TextChoices):
    """Shared base for the project's text choices."""


class CycleStatus(BaseEnum):
    ACTIVE = 'active', 'Active'
    ENDED = 'ended', 'Ended'


class ContributionStatus(BaseEnum):
    PENDING = 'pending', 'Pending'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'


class MemberStatus(BaseEnum):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    SUSPENDED = 'suspended', 'Suspended'


class MemberRole(BaseEnum):
    MEMBER = 'member', 'Member'
    COORDINATOR = 'coordinator', 'Coordinator'
    LEADER = 'leader', 'Leader'


class AdjustmentType(BaseEnum):
    PENALTY = 'penalty', 'Penalty'
    REWARD = 'reward', 'Reward'


class WithdrawalStatus(BaseEnum):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'
    COMPLETED = 'completed', 'Completed'


class PaymentStatus(BaseEnum):
    PENDING = 'pending', 'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    FAILED = 'failed', 'Failed'
    CANCELLED = 'cancelled', 'Cancelled'


class MessageType(BaseEnum):
    ANNOUNCEMENT = 'announcement', 'Announcement'
    DIRECT = 'direct', 'Direct Message'
    CYCLE = 'cycle', 'Cycle Update'
