from datetime import datetime
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from models.subscription_bundle import SubscriptionBundle, UNLIMITED


class SubscriptionBundleRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, bundle: SubscriptionBundle) -> SubscriptionBundle:
        self.db.add(bundle)
        self.db.flush()
        return bundle

    def update(self, bundle: SubscriptionBundle) -> SubscriptionBundle:
        self.db.add(bundle)
        self.db.flush()
        return bundle

    def get(self, bundle_id: str) -> Optional[SubscriptionBundle]:
        return self.db.query(SubscriptionBundle).filter(SubscriptionBundle.id == bundle_id).first()

    def find_by_user(self, user_id: str) -> List[SubscriptionBundle]:
        return (
            self.db.query(SubscriptionBundle)
            .filter(SubscriptionBundle.user_id == user_id)
            .order_by(SubscriptionBundle.created_at.desc())
            .all()
        )

    def find_active_by_user(self, user_id: str) -> List[SubscriptionBundle]:
        return (
            self.db.query(SubscriptionBundle)
            .filter(
                SubscriptionBundle.user_id == user_id,
                SubscriptionBundle.is_active.is_(True),
            )
            .order_by(SubscriptionBundle.created_at.desc())
            .all()
        )

    def find_active_with_remaining_quota(self, user_id: str) -> List[SubscriptionBundle]:
        """Debit candidates, most recently created first."""
        return (
            self.db.query(SubscriptionBundle)
            .filter(
                SubscriptionBundle.user_id == user_id,
                SubscriptionBundle.is_active.is_(True),
                or_(
                    SubscriptionBundle.max_messages == UNLIMITED,
                    SubscriptionBundle.remaining_messages > 0,
                ),
            )
            .order_by(SubscriptionBundle.created_at.desc())
            .all()
        )

    def find_due_for_renewal(self, now: datetime) -> List[SubscriptionBundle]:
        return (
            self.db.query(SubscriptionBundle)
            .filter(
                SubscriptionBundle.is_active.is_(True),
                SubscriptionBundle.auto_renew.is_(True),
                SubscriptionBundle.renewal_date.isnot(None),
                SubscriptionBundle.renewal_date <= now,
            )
            .order_by(SubscriptionBundle.renewal_date.asc())
            .all()
        )
