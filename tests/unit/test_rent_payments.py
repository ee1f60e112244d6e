"""Tenant rent payments: amounts due, fee splits, email codes, completion."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.application.dtos.payment import FeeSplit
from app.application.use_cases import PaymentService
from app.domain.exceptions import (
    AuthRequiredException,
    NotFoundException,
    PermissionDeniedException,
    UpstreamFailureException,
    ValidationException,
    VerificationAttemptsExceededException,
)
from tests.fakes import OWNER, SEEKER, FakeEmailSender, FakePayments


def approved_application(data_api, app_id="app-1", **property_fields) -> dict:
    prop = {
        "id": "p1",
        "title": "Harbour View Apartment",
        "price": 650,
        "security_deposit": None,
        "owner_id": OWNER.id,
        "platform_fee_percentage": 5.0,
        "management_fee_percentage": 0,
        **property_fields,
    }
    row = {
        "id": app_id,
        "property_id": "p1",
        "user_id": SEEKER.id,
        "status": "approved",
        "payment_status": "not_required",
        "properties": prop,
    }
    data_api.tables["rental_applications"].append(row)
    return row


def payment_service(data_access, payments=None, sender=None) -> PaymentService:
    return PaymentService(data_access, payments or FakePayments(), sender or FakeEmailSender())


def verification_row(**overrides) -> dict:
    return {
        "id": "email-v1",
        "application_id": "app-1",
        "email": "seeker@example.com",
        "code": "123456",
        "expires_at": "2999-01-01T00:00:00+00:00",
        "attempts": 0,
        "verified": False,
        **overrides,
    }


def test_fee_split_rounds_each_fee_to_cents() -> None:
    split = FeeSplit.of(Decimal("333.33"), 5, 2.5)
    assert split.platform_fee == Decimal("16.67")
    assert split.management_fee == Decimal("8.33")
    assert split.owner_net == Decimal("308.33")
    assert split.owner_percentage == Decimal("92.5")


async def test_details_list_rent_deposit_and_admin_fee(data_access, data_api) -> None:
    approved_application(data_api)
    details = await payment_service(data_access).payment_details(SEEKER, "app-1")
    assert [(i.type, i.amount) for i in details.items] == [
        ("first_month_rent", Decimal("650.00")),
        ("security_deposit", Decimal("650.00")),
        ("admin_fee", Decimal("100.00")),
    ]
    assert details.total == Decimal("1400.00")
    assert details.application["id"] == "app-1"


async def test_details_only_for_the_applicant_of_an_approved_application(
    data_access, data_api
) -> None:
    service = payment_service(data_access)
    approved_application(data_api)
    approved_application(data_api, app_id="app-2")["status"] = "pending"

    with pytest.raises(AuthRequiredException):
        await service.payment_details(None, "app-1")
    with pytest.raises(PermissionDeniedException):
        await service.payment_details(OWNER, "app-1")
    with pytest.raises(ValidationException, match="Only approved applications"):
        await service.payment_details(SEEKER, "app-2")
    with pytest.raises(NotFoundException):
        await service.payment_details(SEEKER, "missing")


async def test_create_intent_writes_records_and_distributions(data_access, data_api) -> None:
    approved_application(data_api)
    payments = FakePayments()

    result = await payment_service(data_access, payments).create_intent(
        SEEKER, "app-1", card_type="visa"
    )

    assert result.payment_intent_id == "pi_1"
    assert result.client_secret == "pi_1_secret"
    assert result.split.total == Decimal("1400.00")
    assert result.split.platform_fee == Decimal("70.00")
    assert result.split.owner_net == Decimal("1330.00")
    assert result.owner["id"] == OWNER.id
    amount_cents, currency, description, _ = payments.intent_requests[0]
    assert (amount_cents, currency) == (140000, "usd")
    assert "Harbour View Apartment" in description
    assert payments.intents["pi_1"].metadata["application_id"] == "app-1"
    assert payments.intents["pi_1"].metadata["card_type"] == "visa"

    records = data_api.tables["payment_records"]
    assert [r["payment_type"] for r in records] == [
        "first_month_rent",
        "security_deposit",
        "admin_fee",
    ]
    rent = records[0]
    assert rent["payment_intent_id"] == "pi_1" and rent["status"] == "pending"
    assert rent["platform_fee_amount"] == 32.5 and rent["owner_net_amount"] == 617.5

    distributions = data_api.tables["payment_distributions"]
    assert len(distributions) == 6
    rent_shares = [d for d in distributions if d["payment_record_id"] == rent["id"]]
    assert {(d["recipient_type"], d["recipient_id"], d["amount"]) for d in rent_shares} == {
        ("platform", "00000000-0000-0000-0000-000000000000", 32.5),
        ("owner", OWNER.id, 617.5),
    }

    application = data_api.tables["rental_applications"][0]
    assert application["status"] == "payment_pending"
    assert application["payment_status"] == "pending"


async def test_zero_platform_fee_is_honoured_and_management_share_recorded(
    data_access, data_api
) -> None:
    approved_application(
        data_api,
        platform_fee_percentage=0,
        management_fee_percentage=10,
        management_company_id="mgmt-1",
    )
    result = await payment_service(data_access).create_intent(SEEKER, "app-1")

    assert result.split.platform_fee == Decimal("0.00")
    assert result.split.management_fee == Decimal("140.00")
    distributions = data_api.tables["payment_distributions"]
    assert {d["recipient_type"] for d in distributions} == {"management", "owner"}
    assert {d["recipient_id"] for d in distributions if d["recipient_type"] == "management"} == {
        "mgmt-1"
    }


async def test_create_intent_cancels_intent_when_records_are_not_written(
    data_access, data_api
) -> None:
    approved_application(data_api)
    data_api.fail_writes_to.add("payment_records")
    payments = FakePayments()

    with pytest.raises(UpstreamFailureException):
        await payment_service(data_access, payments).create_intent(SEEKER, "app-1")

    assert payments.cancelled == ["pi_1"]
    assert data_api.tables["rental_applications"][0]["status"] == "approved"


async def test_create_intent_requires_a_verified_code_when_one_is_given(
    data_access, data_api
) -> None:
    approved_application(data_api)
    data_api.tables["email_verifications"] = [verification_row()]
    payments = FakePayments()
    service = payment_service(data_access, payments)

    with pytest.raises(ValidationException, match="Email verification required"):
        await service.create_intent(SEEKER, "app-1", verification_id="email-v1")

    data_api.tables["email_verifications"][0]["verified"] = True
    result = await service.create_intent(SEEKER, "app-1", verification_id="email-v1")
    assert result.email_verified is True
    assert payments.intent_requests[0][3] == "seeker@example.com"
    assert data_api.tables["payment_records"][0]["email_verification_id"] == "email-v1"


async def test_send_and_verify_email_code(data_access, data_api) -> None:
    approved_application(data_api)
    sender = FakeEmailSender()
    service = payment_service(data_access, sender=sender)

    sent = await service.send_verification(SEEKER, "app-1", " Seeker@Example.com ")
    assert sent.expires_in == 900
    (stored,) = data_api.tables["email_verifications"]
    assert stored["id"] == sent.verification_id
    assert stored["email"] == "seeker@example.com"
    assert len(stored["code"]) == 6
    assert sender.sent[0].to == "seeker@example.com"
    assert stored["code"] in sender.sent[0].text

    wrong = "000000" if stored["code"] != "000000" else "111111"
    with pytest.raises(ValidationException, match="Invalid verification code"):
        await service.verify_email(SEEKER, "app-1", sent.verification_id, wrong)
    assert stored["attempts"] == 1

    assert await service.verify_email(SEEKER, "app-1", sent.verification_id, stored["code"]) is False
    assert stored["verified"] is True
    assert await service.verify_email(SEEKER, "app-1", sent.verification_id, stored["code"]) is True


async def test_new_code_replaces_unverified_ones(data_access, data_api) -> None:
    approved_application(data_api)
    data_api.tables["email_verifications"] = [
        verification_row(),
        verification_row(id="email-old-verified", verified=True),
    ]
    sent = await payment_service(data_access).send_verification(
        SEEKER, "app-1", "seeker@example.com"
    )
    ids = {r["id"] for r in data_api.tables["email_verifications"]}
    assert ids == {"email-old-verified", sent.verification_id}


async def test_verification_limits(data_access, data_api) -> None:
    approved_application(data_api)
    data_api.tables["email_verifications"] = [
        verification_row(attempts=5),
        verification_row(id="email-v2", expires_at="2000-01-01T00:00:00+00:00"),
    ]
    service = payment_service(data_access)

    with pytest.raises(VerificationAttemptsExceededException) as excinfo:
        await service.verify_email(SEEKER, "app-1", "email-v1", "123456")
    assert excinfo.value.error_code == "TOO_MANY_ATTEMPTS"
    with pytest.raises(ValidationException, match="expired"):
        await service.verify_email(SEEKER, "app-1", "email-v2", "123456")
    with pytest.raises(NotFoundException):
        await service.verify_email(SEEKER, "app-1", "email-unknown", "123456")


async def test_send_verification_removes_code_when_email_fails(data_access, data_api) -> None:
    approved_application(data_api)
    service = payment_service(data_access, sender=FakeEmailSender(fail=True))

    with pytest.raises(UpstreamFailureException):
        await service.send_verification(SEEKER, "app-1", "seeker@example.com")
    assert data_api.tables["email_verifications"] == []


async def test_confirm_completes_a_succeeded_payment_once(data_access, data_api) -> None:
    approved_application(data_api)
    payments = FakePayments()
    service = payment_service(data_access, payments)
    intent = await service.create_intent(SEEKER, "app-1")

    with pytest.raises(ValidationException, match="not succeeded"):
        await service.confirm_payment(SEEKER, "app-1", intent.payment_intent_id)

    payments.succeed(intent.payment_intent_id)
    await service.confirm_payment(SEEKER, "app-1", intent.payment_intent_id)
    await service.confirm_payment(SEEKER, "app-1", intent.payment_intent_id)

    records = data_api.tables["payment_records"]
    assert {r["status"] for r in records} == {"completed"}
    assert all(r["transaction_id"] == "pi_1" and r["paid_at"] for r in records)
    application = data_api.tables["rental_applications"][0]
    assert (application["status"], application["payment_status"]) == ("completed", "completed")
    (agreement,) = data_api.tables["rental_agreements"]
    assert agreement["tenant_id"] == SEEKER.id and agreement["owner_id"] == OWNER.id
    assert agreement["monthly_rent"] == 650 and agreement["security_deposit"] == 650
    start = date.fromisoformat(agreement["lease_start_date"])
    assert date.fromisoformat(agreement["lease_end_date"]) - start == timedelta(days=365)


async def test_confirm_rejects_intent_of_another_application(data_access, data_api) -> None:
    approved_application(data_api)
    approved_application(data_api, app_id="app-2")
    payments = FakePayments()
    service = payment_service(data_access, payments)
    intent = await service.create_intent(SEEKER, "app-2")
    payments.succeed(intent.payment_intent_id)

    with pytest.raises(ValidationException, match="does not belong"):
        await service.confirm_payment(SEEKER, "app-1", intent.payment_intent_id)
    with pytest.raises(PermissionDeniedException):
        await service.confirm_payment(OWNER, "app-2", intent.payment_intent_id)


def _event(event_type: str, intent_id: str, application_id: str | None) -> dict:
    metadata = {"application_id": application_id} if application_id else {}
    return {"id": "evt_1", "type": event_type, "data": {"object": {"id": intent_id, "metadata": metadata}}}


async def test_processor_events_update_records(data_access, data_api) -> None:
    approved_application(data_api)
    approved_application(data_api, app_id="app-2")
    service = payment_service(data_access)
    paid = await service.create_intent(SEEKER, "app-1")
    failed = await service.create_intent(SEEKER, "app-2")

    assert await service.handle_event(
        _event("payment_intent.succeeded", paid.payment_intent_id, "app-1")
    )
    assert await service.handle_event(
        _event("payment_intent.payment_failed", failed.payment_intent_id, "app-2")
    )

    statuses = {(r["payment_intent_id"], r["status"]) for r in data_api.tables["payment_records"]}
    assert statuses == {("pi_1", "completed"), ("pi_2", "failed")}
    first, second = data_api.tables["rental_applications"]
    assert first["status"] == "completed"
    assert (second["status"], second["payment_status"]) == ("approved", "not_required")
    assert len(data_api.tables["rental_agreements"]) == 1

    assert not await service.handle_event(_event("charge.refunded", "pi_1", "app-1"))
    assert not await service.handle_event(_event("payment_intent.succeeded", "pi_9", None))
