"""
Admin HTML page (route editor).
"""

from flask import render_template

from ..blueprint import bp


@bp.route("/admin", methods=["GET"])
def admin_page():
    """Route editor page; it talks to /api/config."""
    return render_template("admin/index.html")
