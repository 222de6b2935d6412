from flask import Blueprint, jsonify

bp = Blueprint("main", __name__)

API_VERSION = "1.0.0"


@bp.route("/")
def index():
    return jsonify(
        {
            "message": "Category Management API",
            "version": API_VERSION,
            "endpoints": [
                "POST /api/categories - Create a category",
                "GET /api/categories - Get all categories with filtering & pagination",
                "GET /api/categories/:id - Get a category by ID",
                "PUT /api/categories/:id - Update a category",
                "DELETE /api/categories/:id - Delete a category",
                "GET /api/categories/parent/:parentId - Get subcategories by parent ID",
                "GET /api/categories/tree - Get category tree structure",
            ],
        }
    )
