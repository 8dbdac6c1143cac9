from __future__ import annotations
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from . import db
from itsdangerous import BadSignature, URLSafeTimedSerializer
from flask import current_app

# Roles a user can hold within a business, in display order.
ROLES = ("admin", "inventory_manager", "ordering_manager", "sales_manager")

INVITATION_PENDING = "pending"
INVITATION_ACCEPTED = "accepted"


def format_role_label(role: str) -> str:
    """'inventory_manager' -> 'Inventory manager'."""
    s = role.replace("_", " ")
    return s[:1].upper() + s[1:]


class User(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    confirmed = db.Column(db.Boolean, default=False, nullable=False)
    confirmed_at = db.Column(db.DateTime, nullable=True)

    business_roles = db.relationship("UserBusinessRole", back_populates="user", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.email or "User"

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def generate_confirmation_token(self) -> str:
        serializer = URLSafeTimedSerializer(current_app.config["SECRET_KEY"])
        return serializer.dumps(self.email, salt=current_app.config.get("SECURITY_PASSWORD_SALT"))

    @staticmethod
    def confirm_token(token: str, expiration: "int | None" = None) -> "str | None":
        expiration = expiration or current_app.config.get("CONFIRM_TOKEN_EXPIRATION", 3600)
        serializer = URLSafeTimedSerializer(current_app.config["SECRET_KEY"])
        try:
            email = serializer.loads(token, salt=current_app.config.get("SECURITY_PASSWORD_SALT"), max_age=expiration)
        except BadSignature:
            return None
        return email


class Business(db.Model):
    __tablename__ = "businesses"
    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    business_address = db.Column(db.String(512), nullable=True)
    # the creating user owns the business permanently
    created_by_user = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    owner = db.relationship("User")
    roles = db.relationship("UserBusinessRole", back_populates="business", cascade="all, delete-orphan")
    invitations = db.relationship("Invitation", back_populates="business", cascade="all, delete-orphan")
    vendors = db.relationship("Vendor", back_populates="business", cascade="all, delete-orphan")
    drink_products = db.relationship("DrinkProduct", back_populates="business", cascade="all, delete-orphan")
    drink_categories = db.relationship("DrinkCategory", back_populates="business", cascade="all, delete-orphan")
    drink_subcategories = db.relationship(
        "DrinkSubcategory", back_populates="business", cascade="all, delete-orphan"
    )


class UserBusinessRole(db.Model):
    __tablename__ = "user_business_roles"
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), primary_key=True)
    role = db.Column(db.String(32), nullable=False)  # one of ROLES
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship("User", back_populates="business_roles")
    business = db.relationship("Business", back_populates="roles")


class Invitation(db.Model):
    __tablename__ = "invitations"
    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    role = db.Column(db.String(32), nullable=False)
    # opaque UUID string embedded in the accept link
    token = db.Column(db.String(36), unique=True, nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default=INVITATION_PENDING)
    expires_at = db.Column(db.DateTime, nullable=True)
    invited_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    invited_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    accepted_at = db.Column(db.DateTime, nullable=True)

    business = db.relationship("Business", back_populates="invitations")
    inviter = db.relationship("User")

    def is_expired(self, now: "datetime | None" = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < (now or datetime.utcnow())


class Vendor(db.Model):
    __tablename__ = "vendors"
    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    account_number = db.Column(db.String(128), nullable=True)
    office_phone = db.Column(db.String(64), nullable=True)
    website = db.Column(db.String(512), nullable=True)
    delivery_days = db.Column(db.Text, nullable=True)  # JSON list, older rows may hold CSV
    case_min = db.Column(db.Integer, nullable=True)
    dollar_min = db.Column(db.Numeric(10, 2), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    business = db.relationship("Business", back_populates="vendors")
    reps = db.relationship(
        "VendorRep", back_populates="vendor", cascade="all, delete-orphan", order_by="VendorRep.name"
    )


class VendorRep(db.Model):
    """A sales rep at a vendor who receives orders by email and/or text."""

    __tablename__ = "vendors_reps"
    id = db.Column(db.Integer, primary_key=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False, default="")
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(64), nullable=True)
    send_by_email = db.Column(db.Boolean, nullable=False, default=False)
    send_by_text = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    vendor = db.relationship("Vendor", back_populates="reps")


class DrinkCategory(db.Model):
    __tablename__ = "drink_categories"
    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    business = db.relationship("Business", back_populates="drink_categories")


class DrinkSubcategory(db.Model):
    __tablename__ = "drink_subcategories"
    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    business = db.relationship("Business", back_populates="drink_subcategories")


class DrinkProduct(db.Model):
    __tablename__ = "drink_products"
    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(128), nullable=True)
    category = db.Column(db.String(128), nullable=True)
    subcategory = db.Column(db.String(128), nullable=True)
    # picked from the business lists; category/subcategory keep the name as typed
    category_id = db.Column(
        db.Integer, db.ForeignKey("drink_categories.id", ondelete="SET NULL"), nullable=True
    )
    subcategory_id = db.Column(
        db.Integer, db.ForeignKey("drink_subcategories.id", ondelete="SET NULL"), nullable=True
    )
    price = db.Column(db.Numeric(10, 2), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    business = db.relationship("Business", back_populates="drink_products")
    packaging = db.relationship(
        "DrinkPackaging", back_populates="product", cascade="all, delete-orphan", order_by="DrinkPackaging.id"
    )


class DrinkPackaging(db.Model):
    __tablename__ = "drink_products_packaging"
    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("drink_products.id"), nullable=False, index=True)
    vendor_id = db.Column(db.Integer, db.ForeignKey("vendors.id"), nullable=True)
    units_per_case = db.Column(db.Integer, nullable=True)
    unit_volume = db.Column(db.String(32), nullable=True)
    measure_type = db.Column(db.String(32), nullable=True)  # ml, L, oz, ...
    unit_type = db.Column(db.String(32), nullable=True)  # bottle, can, keg, ...
    price = db.Column(db.Numeric(10, 2), nullable=True)

    product = db.relationship("DrinkProduct", back_populates="packaging")
    vendor = db.relationship("Vendor")
