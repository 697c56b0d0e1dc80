# admin/setup.py
from flask import abort, redirect, url_for
from flask_login import current_user, logout_user
from flask_admin import Admin, AdminIndexView, expose
from flask_admin.contrib.sqla import ModelView
from flask_admin.menu import MenuLink
from configs import db
from db.models.user import UserRole


# Back office is admin-only; the JSON API has no login page to redirect to


def _is_admin():
    return current_user.is_authenticated and current_user.has_role(UserRole.ADMIN)


def _deny():
    abort(401 if not current_user.is_authenticated else 403)


class MyAdminIndex(AdminIndexView):
    @expose("/")
    def index(self):
        if not _is_admin():
            _deny()
        return super().index()

    @expose("/logout")
    def admin_logout(self):
        if current_user.is_authenticated:
            logout_user()
        return redirect(url_for("main.home"))

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        _deny()


class SecureModelView(ModelView):
    can_view_details = True
    can_export = True

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        _deny()


class UserView(SecureModelView):
    column_searchable_list = ["username", "full_name", "company_name"]
    column_filters = ["role", "status"]
    column_list = ["id", "username", "full_name", "company_name", "role", "status"]
    form_excluded_columns = ["password_hash", "supplier_prices"]


class SupplierPriceView(SecureModelView):
    column_filters = ["supplier_id", "size_quantity_id", "is_preferred"]
    column_list = [
        "id",
        "supplier",
        "size_quantity",
        "price_per_unit",
        "delivery_days",
        "is_preferred",
        "updated_at",
    ]


class SupplierJobView(SecureModelView):
    # manual correction of the fields behind the supplier metrics
    can_create = False
    column_filters = ["status", "supplier_id", "quote_id", "is_cancelled"]
    column_list = [
        "id",
        "quote_id",
        "supplier",
        "status",
        "promised_delivery_days",
        "supplier_ready_at",
        "courier_confirmed_ready",
        "supplier_rating",
        "is_cancelled",
    ]
    form_columns = [
        "status",
        "promised_delivery_days",
        "supplier_ready_at",
        "courier_confirmed_ready",
        "supplier_rating",
        "cancelled_reason",
    ]


class QuoteView(SecureModelView):
    column_filters = ["status", "customer_id"]
    column_list = ["id", "customer", "status", "created_at", "updated_at"]
    form_columns = ["customer", "status"]


def init_admin(app):

    admin = Admin(
        app,
        name="Print Shop Admin",
        index_view=MyAdminIndex(url="/manage"),
        url="/manage",
    )
    # imported here to avoid a circular import
    from db.models.user import User
    from db.models.catalog import Category, Product, ProductSize, SizeQuantity
    from db.models.supplier_price import SupplierPrice
    from db.models.quote import Quote, QuoteItem
    from db.models.supplier_job import SupplierJob
    from db.models.setting import SystemSetting

    admin.add_view(UserView(User, db.session, category="System", endpoint="admin_user", name="Users"))
    admin.add_view(
        SecureModelView(
            SystemSetting,
            db.session,
            category="System",
            endpoint="admin_setting",
            name="Settings",
        )
    )

    for model, endpoint, name in (
        (Category, "admin_category", "Categories"),
        (Product, "admin_product", "Products"),
        (ProductSize, "admin_size", "Sizes"),
        (SizeQuantity, "admin_size_qty", "Quantity Tiers"),
    ):
        admin.add_view(
            SecureModelView(model, db.session, category="Catalog", endpoint=endpoint, name=name)
        )

    admin.add_view(
        SupplierPriceView(
            SupplierPrice,
            db.session,
            category="Suppliers",
            endpoint="admin_supplier_price",
            name="Supplier Prices",
        )
    )
    admin.add_view(
        SupplierJobView(
            SupplierJob,
            db.session,
            category="Suppliers",
            endpoint="admin_supplier_job",
            name="Supplier Jobs",
        )
    )

    admin.add_view(
        QuoteView(Quote, db.session, category="Quotes", endpoint="admin_quote", name="Quotes")
    )
    admin.add_view(
        SecureModelView(
            QuoteItem,
            db.session,
            category="Quotes",
            endpoint="admin_quote_item",
            name="Quote Items",
        )
    )
    admin.add_link(
        MenuLink(
            name="Logout",
            category="System",
            endpoint="admin.admin_logout",
        )
    )

    return admin
