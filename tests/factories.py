# tests/factories.py
from datetime import date
from decimal import Decimal

import factory
from factory.django import DjangoModelFactory

from common.enums import ContributionStatus, CycleStatus, PaymentStatus, WithdrawalStatus
from payments.models import PaymentTransaction
from savings.models import Contribution, SavingsCycle, WithdrawalRequest
from users.models import User


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password = factory.django.Password('testpass123')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_verified = True
    role = User.Role.MEMBER


class AdminFactory(UserFactory):
    username = factory.Sequence(lambda n: f"admin{n}")
    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    role = User.Role.ADMIN
    is_staff = True


class SavingsCycleFactory(DjangoModelFactory):
    class Meta:
        model = SavingsCycle

    name = factory.Sequence(lambda n: f"Cycle {n}")
    start_date = date(2026, 3, 1)
    end_date = date(2026, 3, 31)
    status = CycleStatus.ACTIVE
    total_savings = Decimal('0')
    created_by = factory.SubFactory(AdminFactory)


class ContributionFactory(DjangoModelFactory):
    class Meta:
        model = Contribution

    member = factory.SubFactory(UserFactory)
    amount = Decimal('100.00')
    contribution_date = date(2026, 3, 10)
    status = ContributionStatus.COMPLETED


class WithdrawalRequestFactory(DjangoModelFactory):
    class Meta:
        model = WithdrawalRequest

    member = factory.SubFactory(UserFactory)
    amount = Decimal('50.00')
    status = WithdrawalStatus.PENDING
    reason = "School fees"


class PaymentTransactionFactory(DjangoModelFactory):
    class Meta:
        model = PaymentTransaction

    member = factory.SubFactory(UserFactory)
    merchant_reference = factory.Sequence(lambda n: f"CHM-{n:08d}-1700000000000-ABC123")
    amount = Decimal('200.00')
    phone_number = "254712345678"
    status = PaymentStatus.PENDING
