import pytest
import pytest_asyncio
from pydantic import ValidationError as PydanticValidationError

from cafe_orders.exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from cafe_orders.models.user import (
    AdminLoginRequest,
    ChangePasswordRequest,
    Role,
    UpdateProfileRequest,
    VerifyOtpRequest,
)
from cafe_orders.services.auth_service import AuthService
from cafe_orders.services.seed_service import seed_database


@pytest_asyncio.fixture
async def seeded_db(db):
    await seed_database(db)
    return db


@pytest.mark.asyncio
async def test_student_signs_in_with_otp(db, clock):
    service = AuthService(db, clock)

    otp = await service.send_otp("9876543210")
    user, needs_profile_update = await service.verify_otp("9876543210", otp)

    assert len(otp) == 6 and otp.isdigit()
    assert user.role == Role.STUDENT
    assert user.mobile == "9876543210"
    assert user.owner_tag == f"student:{user.id}"
    assert needs_profile_update is True


@pytest.mark.asyncio
async def test_otp_is_single_use(db, clock):
    service = AuthService(db, clock)
    otp = await service.send_otp("9876543210")
    await service.verify_otp("9876543210", otp)

    with pytest.raises(ValidationError):
        await service.verify_otp("9876543210", otp)


@pytest.mark.asyncio
async def test_wrong_or_expired_otp_is_rejected(db, clock):
    service = AuthService(db, clock)
    otp = await service.send_otp("9876543210")
    wrong = "000000" if otp != "000000" else "111111"

    with pytest.raises(ValidationError):
        await service.verify_otp("9876543210", wrong)

    clock.advance(minutes=6)
    with pytest.raises(ValidationError) as exc_info:
        await service.verify_otp("9876543210", otp)
    assert exc_info.value.message == "OTP expired"


@pytest.mark.asyncio
async def test_verify_unknown_student(db, clock):
    with pytest.raises(NotFoundError):
        await AuthService(db, clock).verify_otp("9000000000", "123456")


@pytest.mark.asyncio
async def test_repeat_send_keeps_same_student(db, clock):
    service = AuthService(db, clock)
    first = await service.send_otp("9876543210")
    second = await service.send_otp("9876543210")
    user, _ = await service.verify_otp("9876543210", second)

    async with db.acquire() as conn:
        student = await conn.get_student_by_mobile("9876543210")
    assert student["id"] == user.id
    assert len(db.state.students) == 1
    if first != second:
        with pytest.raises(ValidationError):
            await service.verify_otp("9876543210", first)


@pytest.mark.asyncio
async def test_profile_update_completes_student(db, clock):
    service = AuthService(db, clock)
    otp = await service.send_otp("9876543210")
    user, _ = await service.verify_otp("9876543210", otp)

    updated = await service.update_profile(
        user, UpdateProfileRequest(email="asha@example.com", name="Asha")
    )
    otp = await service.send_otp("9876543210")
    _, needs_profile_update = await service.verify_otp("9876543210", otp)

    assert updated.name == "Asha"
    assert updated.email == "asha@example.com"
    assert needs_profile_update is False


@pytest.mark.asyncio
async def test_admin_login_needs_password_then_otp(seeded_db, clock):
    service = AuthService(seeded_db, clock)

    with pytest.raises(AuthenticationError):
        await service.request_admin_otp("9999999999", "wrong")

    otp = await service.request_admin_otp("9999999999", "admin123")
    admin = await service.verify_admin_login("9999999999", "admin123", otp)

    assert admin.role == Role.ADMIN
    assert admin.is_admin
    assert admin.name == "Admin"


@pytest.mark.asyncio
async def test_admin_otp_must_match_issued_code(seeded_db, clock):
    service = AuthService(seeded_db, clock)
    otp = await service.request_admin_otp("9999999999", "admin123")
    wrong = "123456" if otp != "123456" else "654321"

    with pytest.raises(ValidationError):
        await service.verify_admin_login("9999999999", "admin123", wrong)


@pytest.mark.asyncio
async def test_admin_changes_password(seeded_db, clock):
    service = AuthService(seeded_db, clock)
    otp = await service.request_admin_otp("9999999999", "admin123")
    admin = await service.verify_admin_login("9999999999", "admin123", otp)

    with pytest.raises(ValidationError):
        await service.change_password(admin, "not-it", "s3cret")

    await service.change_password(admin, "admin123", "s3cret")

    with pytest.raises(AuthenticationError):
        await service.request_admin_otp("9999999999", "admin123")
    assert await service.request_admin_otp("9999999999", "s3cret")


@pytest.mark.asyncio
async def test_role_specific_account_actions(seeded_db, clock):
    service = AuthService(seeded_db, clock)
    otp = await service.send_otp("9876543210")
    student, _ = await service.verify_otp("9876543210", otp)
    otp = await service.request_admin_otp("9999999999", "admin123")
    admin = await service.verify_admin_login("9999999999", "admin123", otp)

    with pytest.raises(PermissionDeniedError):
        await service.change_password(student, "x", "y")
    with pytest.raises(PermissionDeniedError):
        await service.update_profile(admin, UpdateProfileRequest(name="Boss"))


@pytest.mark.asyncio
async def test_non_ascii_otp_is_just_wrong(seeded_db, clock):
    service = AuthService(seeded_db, clock)
    await service.send_otp("9876543210")
    await service.request_admin_otp("9999999999", "admin123")

    with pytest.raises(ValidationError) as exc_info:
        await service.verify_otp("9876543210", "éééééé")
    assert exc_info.value.message == "Invalid OTP"

    with pytest.raises(ValidationError):
        await service.verify_admin_login("9999999999", "admin123", "éééééé")


def test_otp_requests_accept_six_digits_only():
    with pytest.raises(PydanticValidationError):
        VerifyOtpRequest(mobile="9876543210", otp="éééééé")
    with pytest.raises(PydanticValidationError):
        AdminLoginRequest(mobile="9999999999", password="admin123", otp="12a456")

    assert VerifyOtpRequest(mobile="9876543210", otp="012345").otp == "012345"
    assert AdminLoginRequest(mobile="9999999999", password="admin123").otp is None


@pytest.mark.asyncio
async def test_new_password_over_bcrypt_limit_is_rejected(seeded_db, clock):
    service = AuthService(seeded_db, clock)
    otp = await service.request_admin_otp("9999999999", "admin123")
    admin = await service.verify_admin_login("9999999999", "admin123", otp)

    with pytest.raises(ValidationError) as exc_info:
        await service.change_password(admin, "admin123", "x" * 100)
    assert exc_info.value.field == "newPassword"

    # 36 two-byte characters hit the limit exactly
    await service.change_password(admin, "admin123", "é" * 36)
    assert await service.request_admin_otp("9999999999", "é" * 36)


def test_change_password_request_counts_bytes():
    with pytest.raises(PydanticValidationError):
        ChangePasswordRequest(old_password="admin123", new_password="x" * 73)
    with pytest.raises(PydanticValidationError):
        ChangePasswordRequest(old_password="admin123", new_password="é" * 40)

    assert ChangePasswordRequest(old_password="admin123", new_password="x" * 72)
