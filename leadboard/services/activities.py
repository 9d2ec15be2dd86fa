from ..db import Activity, Database, now_utc
from ..guard import Principal, owned_activity, owned_card
from ..schemas import ActivityCreate, ActivityUpdate


class ActivityService:
    def __init__(self, database: Database) -> None:
        self.db = database

    def create_activity(self, principal: Principal, payload: ActivityCreate) -> int:
        with self.db.transaction("create activity") as session:
            card = owned_card(session, payload.card_id, principal)
            activity = Activity(content=payload.text, card_id=card.id)
            session.add(activity)
            session.flush()
            return activity.id

    def update_activity(self, principal: Principal, activity_id: int, payload: ActivityUpdate) -> int:
        with self.db.transaction("update activity") as session:
            activity = owned_activity(session, activity_id, principal)
            activity.content = payload.text
            return activity.id

    def delete_activity(self, principal: Principal, activity_id: int) -> None:
        with self.db.transaction("delete activity") as session:
            activity = owned_activity(session, activity_id, principal)
            activity.deleted_at = now_utc()
