import azure.functions as func

from src.auth.identity_gate import get_identity_gate
from src.repository.content_repository import get_content_repository
from src.views import posts as views


bp = func.Blueprint()


@bp.function_name(name="home")
@bp.route(route="posts", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def home(req: func.HttpRequest) -> func.HttpResponse:
    return views.home(req, get_content_repository())


@bp.function_name(name="search_posts")
@bp.route(route="search", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def search_posts(req: func.HttpRequest) -> func.HttpResponse:
    return views.search(req, get_content_repository())


@bp.function_name(name="post_detail")
@bp.route(route="posts/{post_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def post_detail(req: func.HttpRequest) -> func.HttpResponse:
    return views.post_detail(req, get_content_repository(), get_identity_gate())


@bp.function_name(name="create_comment")
@bp.route(route="posts/{post_id}/comments", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def create_comment(req: func.HttpRequest) -> func.HttpResponse:
    return views.create_comment(req, get_content_repository(), get_identity_gate())


@bp.function_name(name="set_comment_hidden")
@bp.route(route="posts/{post_id}/comments/{comment_id}", methods=["PATCH"], auth_level=func.AuthLevel.ANONYMOUS)
def set_comment_hidden(req: func.HttpRequest) -> func.HttpResponse:
    return views.set_comment_hidden(req, get_content_repository(), get_identity_gate())


@bp.function_name(name="delete_comment")
@bp.route(route="posts/{post_id}/comments/{comment_id}", methods=["DELETE"], auth_level=func.AuthLevel.ANONYMOUS)
def delete_comment(req: func.HttpRequest) -> func.HttpResponse:
    return views.delete_comment(req, get_content_repository(), get_identity_gate())
