from flask import Blueprint, current_app, jsonify, request

from catalog.errors import CategoryError, CategoryValidationError
from catalog.extensions import db
from catalog.forms.category_forms import (
    CategoryForm,
    CategoryUpdateForm,
    parse_category_json,
)
from catalog.services import category_service

bp = Blueprint("categories", __name__)


@bp.errorhandler(CategoryError)
def handle_category_error(error):
    if error.status_code >= 500:
        current_app.logger.error("%s: %s", error.kind, error.message)
    return jsonify(error.to_dict()), error.status_code


def _parent_id_arg(value: str):
    if value == "null":
        return None
    try:
        return int(value)
    except ValueError:
        raise CategoryValidationError(
            "parentId must be a category id or 'null'",
            {"parentId": ["Not a valid integer value."]},
        ) from None


@bp.route("/tree")
def category_tree():
    tree = category_service.build_tree(db.session)
    return jsonify({"success": True, "count": len(tree), "data": tree})


@bp.route("/parent/<parent_id>")
def list_subcategories(parent_id):
    children = category_service.get_subcategories(db.session, _parent_id_arg(parent_id))
    return jsonify(
        {
            "success": True,
            "count": len(children),
            "data": [c.to_dict() for c in children],
        }
    )


@bp.route("", methods=["POST"])
def create_category():
    fields = parse_category_json(CategoryForm, request.get_json(silent=True))
    category = category_service.create_category(db.session, **fields)
    return jsonify({"success": True, "data": category.to_dict()}), 201


@bp.route("", methods=["GET"])
def list_categories():
    per_page = request.args.get(
        "limit", current_app.config["CATEGORIES_PER_PAGE"], type=int
    )
    per_page = min(per_page, current_app.config["CATEGORIES_MAX_PER_PAGE"])

    parent_id = None
    if request.args.get("parentId"):
        parent_id = _parent_id_arg(request.args["parentId"])
        if parent_id is None:
            parent_id = category_service.ROOT

    is_active = None
    if "isActive" in request.args:
        is_active = request.args["isActive"].lower() == "true"

    page = category_service.list_categories(
        db.session,
        name=request.args.get("name") or None,
        parent_id=parent_id,
        is_active=is_active,
        page=request.args.get("page", 1, type=int),
        per_page=per_page,
        sort_by=request.args.get("sortBy", "name"),
        sort_order=request.args.get("sortOrder", "asc"),
    )
    return jsonify(
        {
            "success": True,
            "count": len(page.items),
            "pagination": {
                "total": page.total,
                "page": page.page,
                "limit": page.per_page,
                "pages": page.pages,
            },
            "data": [c.to_dict() for c in page.items],
        }
    )


@bp.route("/<int:category_id>", methods=["GET"])
def get_category(category_id):
    category = category_service.get_category(db.session, category_id)
    return jsonify({"success": True, "data": category.to_dict()})


@bp.route("/<int:category_id>", methods=["PUT"])
def update_category(category_id):
    fields = parse_category_json(CategoryUpdateForm, request.get_json(silent=True))
    category = category_service.update_category(
        db.session,
        category_id,
        max_depth=current_app.config["CATEGORY_MAX_DEPTH"],
        **fields,
    )
    return jsonify({"success": True, "data": category.to_dict()})


@bp.route("/<int:category_id>", methods=["DELETE"])
def delete_category(category_id):
    category_service.delete_category(db.session, category_id)
    return jsonify(
        {"success": True, "data": {}, "message": "Category deleted successfully"}
    )
