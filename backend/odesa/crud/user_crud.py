# odesa/crud/user_crud.py
from datetime import datetime
from typing import List, Optional

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from odesa.core.exceptions import DuplicateEmail, NotFound
from odesa.crud.base import DESC, BaseRepository, storage_operation
from odesa.db.database import USERS
from odesa.models.user import ROLE_USER, SubscriptionInfo, User
from odesa.serialize import to_object_id, utcnow


class UserRepository(BaseRepository):
    collection_name = USERS
    model = User

    @storage_operation("create user")
    async def create(
        self,
        email: str,
        password_hash: str,
        username: Optional[str] = None,
        role: str = ROLE_USER,
        referral_code: Optional[str] = None,
        referred_by: Optional[str] = None,
    ) -> User:
        data = {
            "email": email,
            "passwordHash": password_hash,
            "username": username,
            "role": role,
            "isEmailVerified": False,
            "credits": 0,
            "referralCode": referral_code,
        }
        if referred_by:
            data["referredBy"] = referred_by
        try:
            return await self._insert(data)
        except DuplicateKeyError:
            # lost a race against a concurrent registration
            raise DuplicateEmail()

    @storage_operation("fetch user")
    async def get_by_id(self, user_id: str) -> Optional[User]:
        return await self._find_by_id(user_id)

    @storage_operation("fetch user")
    async def get_by_email(self, email: str) -> Optional[User]:
        return self._to_model(await self.collection.find_one({"email": email}))

    @storage_operation("fetch user")
    async def get_by_referral_code(self, code: str) -> Optional[User]:
        return self._to_model(await self.collection.find_one({"referralCode": code}))

    @storage_operation("list users")
    async def list_users(self, limit: int = 500) -> List[User]:
        return await self._find_many({}, sort=[("createdAt", DESC)], limit=limit)

    async def _update(self, user_id: str, update: dict) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        update.setdefault("$set", {})["updatedAt"] = utcnow()
        doc = await self.collection.find_one_and_update(
            {"_id": oid}, update, return_document=ReturnDocument.AFTER
        )
        return self._to_model(doc)

    @storage_operation("record login")
    async def touch_last_login(self, user_id: str) -> None:
        await self._update(user_id, {"$set": {"lastLoginAt": utcnow()}})

    @storage_operation("update user credits")
    async def set_credits(self, user_id: str, credits: float) -> User:
        user = await self._update(user_id, {"$set": {"credits": credits}})
        if user is None:
            raise NotFound("User not found")
        return user

    @storage_operation("update user credits")
    async def adjust_credits(self, user_id: str, delta: float) -> User:
        user = await self._update(user_id, {"$inc": {"credits": delta}})
        if user is None:
            raise NotFound("User not found")
        return user

    @storage_operation("update user role")
    async def set_role(self, user_id: str, role: str) -> User:
        user = await self._update(user_id, {"$set": {"role": role}})
        if user is None:
            raise NotFound("User not found")
        return user

    @storage_operation("update billing customer")
    async def set_stripe_customer(self, user_id: str, customer_id: str) -> Optional[User]:
        return await self._update(user_id, {"$set": {"stripeCustomerId": customer_id}})

    @storage_operation("update password")
    async def set_password_hash(self, user_id: str, password_hash: str) -> None:
        await self._update(user_id, {"$set": {"passwordHash": password_hash}})

    @storage_operation("store reset token")
    async def store_reset_token(self, user_id: str, token: str, expires_at: datetime) -> None:
        await self._update(
            user_id, {"$set": {"resetToken": token, "resetTokenExpiry": expires_at}}
        )

    @storage_operation("reset password")
    async def consume_reset_token(self, user_id: str, token: str, password_hash: str) -> Optional[User]:
        """
        Swap in the new hash and drop the reset token in a single update.
        Matches only while the token is still stored and unexpired, so a
        token can be spent once.
        """
        oid = to_object_id(user_id)
        if oid is None:
            return None
        now = utcnow()
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "resetToken": token, "resetTokenExpiry": {"$gt": now}},
            {
                "$set": {"passwordHash": password_hash, "updatedAt": now},
                "$unset": {"resetToken": "", "resetTokenExpiry": ""},
            },
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)

    @storage_operation("activate subscription")
    async def activate_subscription(self, user_id: str, subscription: SubscriptionInfo) -> User:
        # whole sub-document replaced: a user holds one subscription record
        user = await self._update(user_id, {"$set": {"subscription": subscription.model_dump()}})
        if user is None:
            raise NotFound("User not found")
        return user

    @storage_operation("sync subscription")
    async def sync_subscription(
        self,
        user_id: str,
        stripe_subscription_id: str,
        status: str,
        end_date: Optional[datetime] = None,
    ) -> Optional[User]:
        """
        Copy the provider's view of a subscription onto the user. Matching on
        the Stripe id keeps a stale refresh from touching a newer record.
        """
        oid = to_object_id(user_id)
        if oid is None:
            return None
        update = {"subscription.status": status, "updatedAt": utcnow()}
        if end_date:
            update["subscription.endDate"] = end_date
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "subscription.stripeSubscriptionId": stripe_subscription_id},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)

    @storage_operation("cancel subscription")
    async def cancel_subscription(self, user_id: str) -> Optional[User]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        now = utcnow()
        doc = await self.collection.find_one_and_update(
            {"_id": oid, "subscription": {"$ne": None}},
            {"$set": {
                "subscription.status": "canceled",
                "subscription.canceledAt": now,
                "updatedAt": now,
            }},
            return_document=ReturnDocument.AFTER,
        )
        return self._to_model(doc)

    @storage_operation("delete user")
    async def delete_by_email(self, email: str) -> bool:
        result = await self.collection.delete_one({"email": email})
        return result.deleted_count > 0

    @storage_operation("count users")
    async def count(self) -> int:
        return await self._count()

    @storage_operation("count users")
    async def count_active_since(self, since: datetime) -> int:
        return await self._count({"lastLoginAt": {"$gte": since}})
