import azure.functions as func

from src.auth.admin_gate import get_admin_gate
from src.auth.identity_gate import get_identity_gate
from src.media.uploader import get_media_uploader
from src.repository.content_repository import get_content_repository
from src.shared.config import get_settings
from src.views import admin as views


bp = func.Blueprint()


@bp.function_name(name="admin_login")
@bp.route(route="admin/login", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_login(req: func.HttpRequest) -> func.HttpResponse:
    return views.login(req, get_identity_gate(), get_settings())


@bp.function_name(name="admin_start_session")
@bp.route(route="admin/session", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_start_session(req: func.HttpRequest) -> func.HttpResponse:
    return views.start_session(req, get_identity_gate(), get_settings())


@bp.function_name(name="admin_logout")
@bp.route(route="admin/logout", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_logout(req: func.HttpRequest) -> func.HttpResponse:
    return views.logout(req, get_identity_gate(), get_settings())


@bp.function_name(name="admin_dashboard")
@bp.route(route="admin/dashboard", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_dashboard(req: func.HttpRequest) -> func.HttpResponse:
    return views.dashboard(req, get_content_repository(), get_admin_gate())


@bp.function_name(name="admin_new_post")
@bp.route(route="admin/posts/new", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_new_post(req: func.HttpRequest) -> func.HttpResponse:
    return views.new_post_form(req, get_admin_gate())


@bp.function_name(name="admin_create_post")
@bp.route(route="admin/posts", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_create_post(req: func.HttpRequest) -> func.HttpResponse:
    return views.create_post(req, get_content_repository(), get_admin_gate())


@bp.function_name(name="admin_edit_post")
@bp.route(route="admin/posts/{post_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_edit_post(req: func.HttpRequest) -> func.HttpResponse:
    return views.edit_post_form(req, get_content_repository(), get_admin_gate())


@bp.function_name(name="admin_update_post")
@bp.route(route="admin/posts/{post_id}", methods=["PUT"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_update_post(req: func.HttpRequest) -> func.HttpResponse:
    return views.update_post(req, get_content_repository(), get_admin_gate())


@bp.function_name(name="admin_set_published")
@bp.route(route="admin/posts/{post_id}/publish", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_set_published(req: func.HttpRequest) -> func.HttpResponse:
    return views.set_published(req, get_content_repository(), get_admin_gate())


@bp.function_name(name="admin_delete_post")
@bp.route(route="admin/posts/{post_id}", methods=["DELETE"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_delete_post(req: func.HttpRequest) -> func.HttpResponse:
    return views.delete_post(req, get_content_repository(), get_admin_gate())


@bp.function_name(name="admin_upload_cover")
@bp.route(route="admin/uploads", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def admin_upload_cover(req: func.HttpRequest) -> func.HttpResponse:
    return views.upload_cover(req, get_media_uploader(), get_admin_gate())
