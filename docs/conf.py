"""Sphinx configuration for the chat-attachments API reference."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

project = "Chat Attachments"
copyright = "2025, Cellular Semantics"
author = "Cellular Semantics"
release = "0.1.0"

extensions = [
    "myst_parser",
    "autoapi.extension",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx_autodoc_typehints",
    "sphinx_design",
]

exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]
myst_enable_extensions = ["colon_fence", "deflist"]

autoapi_type = "python"
autoapi_dirs = ["../src/chat_attachments"]
autoapi_root = "api"
autoapi_add_toctree_entry = True
autoapi_python_class_content = "class"
autoapi_member_order = "groupwise"
autoapi_options = ["members", "show-inheritance", "show-module-summary"]
autoapi_keep_files = False
autoapi_ignore = ["*/__pycache__/*"]


def autoapi_skip_member(app, what, name, obj, skip, options):  # type: ignore[no-untyped-def]
    """Hide private helpers and pydantic field attributes."""
    if name.startswith("_"):
        return True
    if what == "attribute" and hasattr(obj, "__annotations__"):
        return True
    return skip


def setup(app):  # type: ignore[no-untyped-def]
    app.connect("autoapi-skip-member", autoapi_skip_member)


html_theme = "sphinx_rtd_theme"
html_theme_options = {"navigation_depth": 3, "collapse_navigation": False}
html_title = f"{project} v{release}"

napoleon_google_docstring = True
napoleon_numpy_docstring = False
napoleon_include_init_with_doc = False
napoleon_use_param = True
napoleon_use_rtype = True

typehints_fully_qualified = False
always_document_param_types = True
