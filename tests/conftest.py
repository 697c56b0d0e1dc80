"""
Shared pytest fixtures: an app on in-memory SQLite with fresh tables per test,
a small data factory, and test clients logged in as office staff or a supplier.
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from flask import g
from werkzeug.security import generate_password_hash

from app import create_app
from configs import db
from db.models.catalog import Category, Product, ProductSize, SizeQuantity
from db.models.quote import Quote, QuoteItem, QuoteStatus
from db.models.supplier_job import SupplierJob, SupplierJobStatus
from db.models.supplier_price import SupplierPrice
from db.models.user import User, UserRole, UserStatus

TEST_PASSWORD = "secret"


@pytest.fixture
def app():
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite://",
            "SECRET_KEY": "test",
        }
    )

    # requests share the fixture app context, so drop the user Flask-Login cached on g
    @app.before_request
    def _reload_login_user():
        g.pop("_login_user", None)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


class Factory:
    """Builds rows straight through the session; every helper commits."""

    password = TEST_PASSWORD

    def __init__(self):
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    def user(self, role=UserRole.EMPLOYEE, status=UserStatus.ACTIVE, **kw):
        n = self._next()
        u = User(
            username=kw.pop("username", f"{role.value.lower()}{n}"),
            password_hash=generate_password_hash(TEST_PASSWORD),
            full_name=kw.pop("full_name", f"{role.value.title()} {n}"),
            role=role,
            status=status,
            **kw,
        )
        db.session.add(u)
        db.session.commit()
        return u

    def supplier(self, status=UserStatus.ACTIVE, **kw):
        kw.setdefault("company_name", f"Supplier Co {self._seq + 1}")
        return self.user(role=UserRole.SUPPLIER, status=status, **kw)

    def category(self, name):
        c = Category.query.filter_by(name=name).first()
        if not c:
            c = Category(name=name, is_active=True)
            db.session.add(c)
            db.session.commit()
        return c

    def unit(self, product="Flyers", category="Printing", size="A4", quantity=100):
        """A priceable unit under a fresh product; category=None leaves it uncategorised."""
        p = Product(
            name=product,
            category_id=self.category(category).id if category else None,
            is_active=True,
        )
        db.session.add(p)
        db.session.flush()
        s = ProductSize(product_id=p.id, name=size)
        db.session.add(s)
        db.session.flush()
        sq = SizeQuantity(size_id=s.id, quantity=quantity, price=0)
        db.session.add(sq)
        db.session.commit()
        return sq

    def price(self, supplier, unit, price, days=3):
        sp = SupplierPrice(
            supplier_id=supplier.id,
            size_quantity_id=unit.id,
            price_per_unit=Decimal(str(price)),
            delivery_days=days,
        )
        db.session.add(sp)
        db.session.commit()
        return sp

    def quote(self, lines, status=QuoteStatus.APPROVED, customer=None):
        """lines: [(unit, quantity), ...]; returns (quote, [items])."""
        q = Quote(customer_id=customer.id if customer else None, status=status)
        db.session.add(q)
        db.session.flush()
        items = []
        for unit, qty in lines:
            qi = QuoteItem(quote_id=q.id, size_quantity_id=unit.id, quantity=qty)
            db.session.add(qi)
            items.append(qi)
        db.session.commit()
        return q, items

    def job(
        self,
        supplier,
        item,
        status=SupplierJobStatus.PENDING,
        promised_days=3,
        elapsed_days=None,
        rating=None,
        cancelled=False,
    ):
        """A job row for metric tests; elapsed_days sets supplier_ready_at."""
        created = datetime(2024, 1, 1, 9, 0, 0)
        job = SupplierJob(
            supplier_id=supplier.id,
            quote_id=item.quote_id,
            quote_item_id=item.id,
            size_quantity_id=item.size_quantity_id,
            quantity=item.quantity,
            price_per_unit=Decimal("1.00"),
            status=status,
            promised_delivery_days=promised_days,
            is_accepted=status not in (SupplierJobStatus.PENDING, SupplierJobStatus.CANCELLED),
            is_cancelled=cancelled,
            created_at=created,
            supplier_ready_at=(
                created + timedelta(days=elapsed_days) if elapsed_days is not None else None
            ),
            supplier_rating=Decimal(str(rating)) if rating is not None else None,
        )
        db.session.add(job)
        db.session.commit()
        return job


@pytest.fixture
def factory(app):
    return Factory()


def login_as(client, user):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(user.id)
        sess["_fresh"] = True
    return client


@pytest.fixture
def client_for(app):
    """client_for(user) -> a fresh test client with `user` logged in."""

    def _make(user):
        return login_as(app.test_client(), user)

    return _make


@pytest.fixture
def staff(factory):
    return factory.user(role=UserRole.EMPLOYEE)


@pytest.fixture
def admin_user(factory):
    return factory.user(role=UserRole.ADMIN)


@pytest.fixture
def staff_client(app, staff):
    return login_as(app.test_client(), staff)


@pytest.fixture
def admin_client(app, admin_user):
    return login_as(app.test_client(), admin_user)
