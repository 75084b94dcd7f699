# cafe_orders/services/auth_service.py
import logging
from datetime import datetime
from typing import Callable, Optional, Tuple
from ..database import BaseDatabase
from ..exceptions import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError
)
from ..models.user import Admin, Role, SessionUser, Student, UpdateProfileRequest
from ..utils.formatters import utc_now
from ..utils.security import (
    check_password,
    generate_otp,
    hash_password,
    MAX_PASSWORD_BYTES,
    otp_expiry,
    otp_matches,
    password_too_long
)


class AuthService:
    """Student OTP login and admin password + OTP login"""

    def __init__(self, db: BaseDatabase, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.clock = clock or utc_now
        self.logger = logging.getLogger(__name__)

    def _expired(self, expiry: Optional[datetime]) -> bool:
        return expiry is None or self.clock() > expiry

    async def send_otp(self, mobile: str) -> str:
        """Issue a fresh OTP, registering the student on first use"""
        now = self.clock()
        otp = generate_otp()
        async with self.db.transaction() as conn:
            student = await conn.get_student_by_mobile(mobile)
            if not student:
                student = await conn.insert_student(mobile)
                self.logger.info(f"Registered student {student['id']}")
            await conn.set_student_otp(student['id'], otp, otp_expiry(now))
        return otp

    async def verify_otp(self, mobile: str, otp: str) -> Tuple[SessionUser, bool]:
        """Check a student OTP; returns the session user and whether the profile is incomplete"""
        async with self.db.transaction() as conn:
            record = await conn.get_student_by_mobile(mobile)
            if not record:
                raise NotFoundError("Student not found")
            student = Student.model_validate(record)

            if not otp_matches(student.otp, otp):
                raise ValidationError("Invalid OTP", field="otp")

            if self._expired(student.otp_expiry):
                raise ValidationError("OTP expired", field="otp")

            await conn.set_student_otp(student.id, None, None)

        user = SessionUser(
            id=student.id,
            mobile=student.mobile,
            email=student.email,
            name=student.name,
            role=Role.STUDENT
        )
        return user, not student.email or not student.name

    async def _authenticate_admin(self, conn, mobile: str, password: str) -> Admin:
        record = await conn.get_admin_by_mobile(mobile)
        if not record or not check_password(password, record['password']):
            raise AuthenticationError("Invalid credentials")
        return Admin.model_validate(record)

    async def request_admin_otp(self, mobile: str, password: str) -> str:
        """First admin login step: check the password and issue an OTP"""
        now = self.clock()
        otp = generate_otp()
        async with self.db.transaction() as conn:
            admin = await self._authenticate_admin(conn, mobile, password)
            await conn.set_admin_otp(admin.id, otp, otp_expiry(now))
        return otp

    async def verify_admin_login(self, mobile: str, password: str, otp: str) -> SessionUser:
        """Second admin login step: password and the OTP issued for it"""
        async with self.db.transaction() as conn:
            admin = await self._authenticate_admin(conn, mobile, password)

            if not otp_matches(admin.otp, otp):
                raise ValidationError("Invalid OTP", field="otp")

            if self._expired(admin.otp_expiry):
                raise ValidationError("OTP expired", field="otp")

            await conn.set_admin_otp(admin.id, None, None)

        self.logger.info(f"Admin {admin.id} logged in")
        return SessionUser(
            id=admin.id,
            mobile=admin.mobile,
            name=admin.name,
            role=Role.ADMIN
        )

    async def update_profile(self, user: SessionUser, data: UpdateProfileRequest) -> SessionUser:
        if user.role != Role.STUDENT:
            raise PermissionDeniedError("Only students can update profile")

        async with self.db.acquire() as conn:
            student = await conn.update_student_profile(user.id, data.model_dump(exclude_none=True))
        if not student:
            raise NotFoundError("Student not found")

        return user.model_copy(update={'email': student['email'], 'name': student['name']})

    async def change_password(self, user: SessionUser, old_password: str, new_password: str):
        if user.role != Role.ADMIN:
            raise PermissionDeniedError("Only admins can change password")

        if password_too_long(new_password):
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                field="newPassword"
            )

        async with self.db.transaction() as conn:
            admin = await conn.get_admin_by_mobile(user.mobile)
            if not admin:
                raise NotFoundError("Admin not found")

            if not check_password(old_password, admin['password']):
                raise ValidationError("Current password is incorrect", field="oldPassword")

            await conn.update_admin_password(admin['id'], hash_password(new_password))

        self.logger.info(f"Admin {admin['id']} changed password")
