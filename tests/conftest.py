import pytest
from fastapi.testclient import TestClient

from leadboard.auth import create_access_token
from leadboard.config import Settings
from leadboard.db import Card, ListModel, User
from leadboard.guard import Principal
from leadboard.main import create_app


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        environment="test",
        database_url="sqlite://",
        jwt_secret="test-secret",
        enc_secret="abcdefghijklmnopqrstuvwxyz012345",
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.state.database.init_db()
    return app


@pytest.fixture
def database(app):
    return app.state.database


@pytest.fixture
def services(app):
    return app.state.services


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


class Seed:
    """Direct inserts for arranging test data without going through the API."""

    def __init__(self, database, settings):
        self.database = database
        self.settings = settings

    def user(self, email="ada@example.com", name="Ada") -> int:
        with self.database.transaction("seed user") as session:
            user = User(email=email, name=name)
            session.add(user)
            session.flush()
            return user.id

    def new_list(self, user_id: int, name="New Leads", order=1.0) -> int:
        with self.database.transaction("seed list") as session:
            lst = ListModel(name=name, color="#F9BA0B", user_id=user_id, list_order=order)
            session.add(lst)
            session.flush()
            return lst.id

    def card(self, list_id: int, order: float, name="Card") -> int:
        with self.database.transaction("seed card") as session:
            card = Card(name=name, list_id=list_id, card_order=order)
            session.add(card)
            session.flush()
            return card.id

    def orders(self, list_id: int) -> list[tuple[int, float]]:
        """(card id, order) for live cards of a list, in display order."""
        with self.database.transaction("read orders") as session:
            cards = (
                session.query(Card)
                .filter(Card.list_id == list_id, Card.deleted_at.is_(None))
                .order_by(Card.card_order.asc(), Card.id.asc())
                .all()
            )
            return [(c.id, c.card_order) for c in cards]

    def headers(self, user_id: int) -> dict:
        return {"Authorization": f"Bearer {create_access_token(self.settings, user_id)}"}


@pytest.fixture
def seed(database, settings):
    return Seed(database, settings)


@pytest.fixture
def alice(seed):
    return Principal(user_id=seed.user("alice@example.com", "Alice"))


@pytest.fixture
def bob(seed):
    return Principal(user_id=seed.user("bob@example.com", "Bob"))
