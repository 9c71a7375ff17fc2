import os
import logging
import azure.functions as func

from src.function_blueprints.http_admin import bp as admin_bp
from src.function_blueprints.http_blog import bp as blog_bp

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
        logging.getLogger("azure.cosmos").setLevel(level)
        logging.getLogger("azure.storage.blob").setLevel(level)
    blog_level = (os.getenv("BLOG_LOG_LEVEL") or "INFO").upper()
    logging.getLogger("blog").setLevel(getattr(logging, blog_level, logging.INFO))


_configure_logging()

app.register_functions(blog_bp)
app.register_functions(admin_bp)
