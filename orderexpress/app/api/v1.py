from __future__ import annotations
from decimal import Decimal, InvalidOperation
from flask import Blueprint, jsonify, request, abort, g, current_app
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .. import db
from ..auth.permissions import business_required, section_required
from ..businesses.routes import create_business
from ..dashboard.context import accessible_businesses, select_business
from ..dashboard.navigation import ORDERING, PRODUCTS, allowed_sections
from ..errors import NoBusinessAccess
from ..models import DrinkCategory, DrinkPackaging, DrinkProduct, DrinkSubcategory, Vendor, VendorRep
from ..preferences import sidebar_collapsed
from ..utils.display import packaging_label, parse_delivery_days, serialize_delivery_days, unit_price_label

api_bp = Blueprint("api_v1", __name__)


@api_bp.errorhandler(HTTPException)
def json_error(exc: HTTPException):
    return jsonify({"error": exc.description}), exc.code


def _money(value) -> "Decimal | None":
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except InvalidOperation:
        abort(400, f"invalid amount: {value!r}")


def _int(value) -> "int | None":
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        abort(400, f"invalid integer: {value!r}")


def _text(data: dict, key: str) -> "str | None":
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        abort(400, f"{key} must be a string")
    return value.strip() or None


def _flag(data: dict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        abort(400, f"{key} must be true or false")
    return value


def _payload() -> dict:
    data = request.get_json() or {}
    if not isinstance(data, dict):
        abort(400, "expected a JSON object")
    return data


def _commit(what: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to save %s", what)
        abort(400, str(getattr(exc, "orig", None) or exc))


@api_bp.route("/context", methods=["GET"])
@login_required
@business_required
def context():
    return jsonify({
        "business": {"id": g.business.id, "business_name": g.business.business_name},
        "role": g.role,
        "sections": list(allowed_sections(g.role)),
        "sidebar_collapsed": sidebar_collapsed(g.preferences),
    })


@api_bp.route("/businesses", methods=["GET"])
@login_required
def list_businesses():
    return jsonify([
        {
            "id": b.id,
            "business_name": b.business_name,
            "business_address": b.business_address,
            "owned": b.created_by_user == current_user.id,
        }
        for b in accessible_businesses(current_user.id)
    ])


@api_bp.route("/businesses", methods=["POST"])
@login_required
def create_business_api():
    data = _payload()
    name = _text(data, "business_name")
    if not name:
        abort(400, "business_name is required")
    try:
        business = create_business(current_user.id, name, _text(data, "business_address"))
    except SQLAlchemyError:
        abort(400, "Could not create business.")
    return jsonify({"id": business.id}), 201


@api_bp.route("/businesses/<int:business_id>/select", methods=["POST"])
@login_required
@business_required
def select_business_api(business_id: int):
    try:
        business = select_business(current_user.id, business_id, g.preferences)
    except NoBusinessAccess:
        abort(403)
    return jsonify({"id": business.id})


# Vendors (ordering section)

def vendor_to_dict(v: Vendor) -> dict:
    return {
        "id": v.id,
        "business_id": v.business_id,
        "name": v.name,
        "notes": v.notes,
        "account_number": v.account_number,
        "office_phone": v.office_phone,
        "website": v.website,
        "delivery_days": parse_delivery_days(v.delivery_days),
        "case_min": v.case_min,
        "dollar_min": str(v.dollar_min) if v.dollar_min is not None else None,
        "reps": [rep_to_dict(r) for r in v.reps],
    }


def _apply_vendor(v: Vendor, data: dict) -> None:
    if "name" in data:
        name = _text(data, "name")
        if not name:
            abort(400, "name is required")
        v.name = name
    for key in ("notes", "account_number", "office_phone", "website"):
        if key in data:
            setattr(v, key, _text(data, key))
    if "delivery_days" in data:
        days = data.get("delivery_days")
        if days is not None and not isinstance(days, (str, list)):
            abort(400, "delivery_days must be a string or a list")
        v.delivery_days = serialize_delivery_days(days)
    if "case_min" in data:
        v.case_min = _int(data.get("case_min"))
    if "dollar_min" in data:
        v.dollar_min = _money(data.get("dollar_min"))


def _get_vendor(vendor_id: int) -> Vendor:
    v = Vendor.query.filter_by(id=vendor_id, business_id=g.business.id).first()
    if v is None:
        abort(404, "vendor not found")
    return v


@api_bp.route("/vendors", methods=["GET"])
@login_required
@section_required(ORDERING)
def list_vendors():
    vendors = Vendor.query.filter_by(business_id=g.business.id).all()
    vendors.sort(key=lambda v: v.name.lower())
    return jsonify([vendor_to_dict(v) for v in vendors])


@api_bp.route("/vendors", methods=["POST"])
@login_required
@section_required(ORDERING)
def create_vendor():
    data = _payload()
    if not _text(data, "name"):
        abort(400, "name is required")
    v = Vendor(business_id=g.business.id)
    _apply_vendor(v, data)
    db.session.add(v)
    _commit("vendor")
    return jsonify(vendor_to_dict(v)), 201


@api_bp.route("/vendors/<int:vendor_id>", methods=["PATCH"])
@login_required
@section_required(ORDERING)
def update_vendor(vendor_id: int):
    v = _get_vendor(vendor_id)
    _apply_vendor(v, _payload())
    _commit("vendor")
    return jsonify(vendor_to_dict(v))


@api_bp.route("/vendors/<int:vendor_id>", methods=["DELETE"])
@login_required
@section_required(ORDERING)
def delete_vendor(vendor_id: int):
    v = _get_vendor(vendor_id)
    DrinkPackaging.query.filter_by(vendor_id=v.id).update({"vendor_id": None}, synchronize_session=False)
    db.session.delete(v)
    _commit("vendor")
    return jsonify({"removed": True, "id": vendor_id})


def rep_to_dict(r: VendorRep) -> dict:
    return {
        "id": r.id,
        "vendor_id": r.vendor_id,
        "name": r.name,
        "email": r.email,
        "phone": r.phone,
        "send_by_email": r.send_by_email,
        "send_by_text": r.send_by_text,
    }


def _apply_rep(r: VendorRep, data: dict) -> None:
    if "name" in data:
        r.name = _text(data, "name") or ""
    for key in ("email", "phone"):
        if key in data:
            setattr(r, key, _text(data, key))
    for key in ("send_by_email", "send_by_text"):
        if key in data:
            setattr(r, key, _flag(data, key))


def _get_rep(vendor: Vendor, rep_id: int) -> VendorRep:
    r = VendorRep.query.filter_by(id=rep_id, vendor_id=vendor.id).first()
    if r is None:
        abort(404, "rep not found")
    return r


@api_bp.route("/vendors/<int:vendor_id>/reps", methods=["GET"])
@login_required
@section_required(ORDERING)
def list_reps(vendor_id: int):
    v = _get_vendor(vendor_id)
    reps = VendorRep.query.filter_by(vendor_id=v.id).order_by(VendorRep.name).all()
    return jsonify([rep_to_dict(r) for r in reps])


@api_bp.route("/vendors/<int:vendor_id>/reps", methods=["POST"])
@login_required
@section_required(ORDERING)
def create_rep(vendor_id: int):
    v = _get_vendor(vendor_id)
    r = VendorRep(vendor_id=v.id, name="", send_by_email=False, send_by_text=False)
    _apply_rep(r, _payload())
    db.session.add(r)
    _commit("vendor rep")
    return jsonify(rep_to_dict(r)), 201


@api_bp.route("/vendors/<int:vendor_id>/reps/<int:rep_id>", methods=["PATCH"])
@login_required
@section_required(ORDERING)
def update_rep(vendor_id: int, rep_id: int):
    r = _get_rep(_get_vendor(vendor_id), rep_id)
    _apply_rep(r, _payload())
    _commit("vendor rep")
    return jsonify(rep_to_dict(r))


@api_bp.route("/vendors/<int:vendor_id>/reps/<int:rep_id>", methods=["DELETE"])
@login_required
@section_required(ORDERING)
def delete_rep(vendor_id: int, rep_id: int):
    r = _get_rep(_get_vendor(vendor_id), rep_id)
    db.session.delete(r)
    _commit("vendor rep")
    return jsonify({"removed": True, "id": rep_id})


# Drink products (products section)

def packaging_to_dict(p: DrinkPackaging) -> dict:
    vendor_name = p.vendor.name if p.vendor else None
    return {
        "id": p.id,
        "vendor_id": p.vendor_id,
        "units_per_case": p.units_per_case,
        "unit_volume": p.unit_volume,
        "measure_type": p.measure_type,
        "unit_type": p.unit_type,
        "price": str(p.price) if p.price is not None else None,
        "label": packaging_label(vendor_name, p.units_per_case, p.unit_volume, p.measure_type, p.unit_type),
        "unit_price_label": unit_price_label(p.price, p.units_per_case, p.unit_type),
    }


def product_to_dict(p: DrinkProduct) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "sku": p.sku,
        "category": p.category,
        "subcategory": p.subcategory,
        "category_id": p.category_id,
        "subcategory_id": p.subcategory_id,
        "price": str(p.price) if p.price is not None else None,
        "notes": p.notes,
        "packaging": [packaging_to_dict(pk) for pk in p.packaging],
    }


def _build_packaging(rows) -> list[DrinkPackaging]:
    if not isinstance(rows, list):
        abort(400, "packaging must be a list")
    out = []
    for row in rows:
        if not isinstance(row, dict):
            abort(400, "packaging rows must be objects")
        vendor_id = _int(row.get("vendor_id"))
        if vendor_id is not None:
            _get_vendor(vendor_id)
        out.append(DrinkPackaging(
            vendor_id=vendor_id,
            units_per_case=_int(row.get("units_per_case")),
            unit_volume=(str(row.get("unit_volume") or "").strip() or None),
            measure_type=_text(row, "measure_type"),
            unit_type=_text(row, "unit_type"),
            price=_money(row.get("price")),
        ))
    return out


def _apply_product(p: DrinkProduct, data: dict) -> None:
    if "name" in data:
        name = _text(data, "name")
        if not name:
            abort(400, "name is required")
        p.name = name
    for key in ("sku", "category", "subcategory", "notes"):
        if key in data:
            setattr(p, key, _text(data, key))
    # a picked list entry overrides the typed name
    for key, model in (("category", DrinkCategory), ("subcategory", DrinkSubcategory)):
        if f"{key}_id" not in data:
            continue
        picked_id = _int(data.get(f"{key}_id"))
        picked = _get_listed(model, picked_id) if picked_id is not None else None
        setattr(p, f"{key}_id", picked.id if picked else None)
        if picked:
            setattr(p, key, picked.name)
    if "price" in data:
        p.price = _money(data.get("price"))
    if "packaging" in data:
        # replaced wholesale on every save
        p.packaging = _build_packaging(data.get("packaging"))


def _get_product(product_id: int) -> DrinkProduct:
    p = DrinkProduct.query.filter_by(id=product_id, business_id=g.business.id).first()
    if p is None:
        abort(404, "product not found")
    return p


@api_bp.route("/products", methods=["GET"])
@login_required
@section_required(PRODUCTS)
def list_products():
    q = DrinkProduct.query.filter_by(business_id=g.business.id)
    search = request.args.get("query", "", type=str).strip()
    if search:
        q = q.filter(DrinkProduct.name.ilike(f"%{search}%") | DrinkProduct.sku.ilike(f"%{search}%"))
    return jsonify([product_to_dict(p) for p in q.order_by(DrinkProduct.name).all()])


@api_bp.route("/products", methods=["POST"])
@login_required
@section_required(PRODUCTS)
def create_product():
    data = _payload()
    if not _text(data, "name"):
        abort(400, "name is required")
    p = DrinkProduct(business_id=g.business.id)
    _apply_product(p, data)
    db.session.add(p)
    _commit("product")
    return jsonify(product_to_dict(p)), 201


@api_bp.route("/products/<int:product_id>", methods=["GET"])
@login_required
@section_required(PRODUCTS)
def get_product(product_id: int):
    return jsonify(product_to_dict(_get_product(product_id)))


@api_bp.route("/products/<int:product_id>", methods=["PATCH"])
@login_required
@section_required(PRODUCTS)
def update_product(product_id: int):
    p = _get_product(product_id)
    _apply_product(p, _payload())
    _commit("product")
    return jsonify(product_to_dict(p))


@api_bp.route("/products/<int:product_id>", methods=["DELETE"])
@login_required
@section_required(PRODUCTS)
def delete_product(product_id: int):
    p = _get_product(product_id)
    db.session.delete(p)
    _commit("product")
    return jsonify({"removed": True, "id": product_id})


# Drink categories and subcategories (products section)

_LABELS = {DrinkCategory: "category", DrinkSubcategory: "subcategory"}

def _get_listed(model, item_id: int):
    item = model.query.filter_by(id=item_id, business_id=g.business.id).first()
    if item is None:
        abort(404, f"{_LABELS[model]} not found")
    return item


def _listed_to_dict(item) -> dict:
    return {"id": item.id, "name": item.name}


def _list_names(model):
    items = model.query.filter_by(business_id=g.business.id).order_by(model.name).all()
    return jsonify([_listed_to_dict(i) for i in items])


def _add_name(model):
    name = _text(_payload(), "name")
    if not name:
        abort(400, "name is required")
    item = model(business_id=g.business.id, name=name)
    db.session.add(item)
    _commit(_LABELS[model])
    return jsonify(_listed_to_dict(item)), 201


def _rename(model, item_id: int):
    item = _get_listed(model, item_id)
    name = _text(_payload(), "name")
    if not name:
        abort(400, "name is required")
    item.name = name
    _commit(_LABELS[model])
    return jsonify(_listed_to_dict(item))


def _remove_name(model, item_id: int, column):
    item = _get_listed(model, item_id)
    DrinkProduct.query.filter(column == item.id).update({column: None}, synchronize_session=False)
    db.session.delete(item)
    _commit(_LABELS[model])
    return jsonify({"removed": True, "id": item_id})


@api_bp.route("/drink-categories", methods=["GET"])
@login_required
@section_required(PRODUCTS)
def list_drink_categories():
    return _list_names(DrinkCategory)


@api_bp.route("/drink-categories", methods=["POST"])
@login_required
@section_required(PRODUCTS)
def add_drink_category():
    return _add_name(DrinkCategory)


@api_bp.route("/drink-categories/<int:item_id>", methods=["PATCH"])
@login_required
@section_required(PRODUCTS)
def rename_drink_category(item_id: int):
    return _rename(DrinkCategory, item_id)


@api_bp.route("/drink-categories/<int:item_id>", methods=["DELETE"])
@login_required
@section_required(PRODUCTS)
def delete_drink_category(item_id: int):
    return _remove_name(DrinkCategory, item_id, DrinkProduct.category_id)


@api_bp.route("/drink-subcategories", methods=["GET"])
@login_required
@section_required(PRODUCTS)
def list_drink_subcategories():
    return _list_names(DrinkSubcategory)


@api_bp.route("/drink-subcategories", methods=["POST"])
@login_required
@section_required(PRODUCTS)
def add_drink_subcategory():
    return _add_name(DrinkSubcategory)


@api_bp.route("/drink-subcategories/<int:item_id>", methods=["PATCH"])
@login_required
@section_required(PRODUCTS)
def rename_drink_subcategory(item_id: int):
    return _rename(DrinkSubcategory, item_id)


@api_bp.route("/drink-subcategories/<int:item_id>", methods=["DELETE"])
@login_required
@section_required(PRODUCTS)
def delete_drink_subcategory(item_id: int):
    return _remove_name(DrinkSubcategory, item_id, DrinkProduct.subcategory_id)
