# kubeplane/app.py
from wsgiref.simple_server import make_server
import json
import logging
import re
import sys

from kubeplane.backends.identity import HeaderIdentityProvider
from kubeplane.config import get_settings
from kubeplane.database import models
from kubeplane.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_project_repository import SqlalchemyProjectRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_membership_repository import SqlalchemyMembershipRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_cluster_repository import SqlalchemyClusterRepository
from kubeplane.repositories.sqlalchemy.sqlalchemy_addon_repository import SqlalchemyAddonRepository
from kubeplane.services.authorization_service import AuthorizationService
from kubeplane.services.cluster_service import ClusterService
from kubeplane.services.identity_service import IdentityService
from kubeplane.services.project_service import ProjectService
from kubeplane.services.exceptions import (
    ClusterNotFoundError, ConflictError, ForbiddenError, ProjectNotFoundError,
    UnauthenticatedError, UserNotFoundError, ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_TEXT = {
    200: "200 OK",
    201: "201 Created",
    204: "204 No Content",
    400: "400 Bad Request",
    401: "401 Unauthorized",
    403: "403 Forbidden",
    404: "404 Not Found",
    405: "405 Method Not Allowed",
    409: "409 Conflict",
    500: "500 Internal Server Error",
}

ERROR_MAP = {
    UnauthenticatedError: 401,
    ForbiddenError: 403,
    ProjectNotFoundError: 404,
    ClusterNotFoundError: 404,
    UserNotFoundError: 404,
    ConflictError: 409,
    ValidationError: 400,
    ValueError: 400,
}

# --------------------------------------------------------------------------
## 요청/응답 처리 유틸리티 함수
# --------------------------------------------------------------------------

def get_request_data(environ):
    try:
        content_length = int(environ.get("CONTENT_LENGTH") or 0)
        data = json.loads(environ["wsgi.input"].read(content_length)) if content_length > 0 else {}
    except (ValueError, json.JSONDecodeError):
        raise ValidationError("Invalid or missing JSON body.")
    if not isinstance(data, dict):
        raise ValidationError("JSON body must be an object.")
    return data

def error_body(code, message):
    return json.dumps({"error": {"code": code, "message": message}})

def handle_exception(e):
    code = ERROR_MAP.get(type(e), 500)
    if code == 500:
        logger.exception("Unhandled error while serving request")
    return STATUS_TEXT[code], error_body(code, str(e))

def format_timestamp(value):
    return value.strftime("%Y-%m-%dT%H:%M:%SZ") if value else None

def project_view(project: models.Project):
    return {
        "id": project.id,
        "name": project.display_name,
        "creationTimestamp": format_timestamp(project.created_at),
        "status": project.phase,
    }

def member_view(membership: models.Membership):
    return {
        "id": membership.user_id,
        "email": membership.user.email if membership.user else "",
        "role": membership.role,
    }

def cluster_view(cluster: models.Cluster):
    return {
        "id": cluster.id,
        "name": cluster.name,
        "projectId": cluster.project_id,
        "creationTimestamp": format_timestamp(cluster.created_at),
        "status": cluster.phase,
    }

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def build_services(db_session, settings=None):
    """요청마다 세션 하나로 리포지토리와 서비스를 조립합니다."""
    user_repo = SqlalchemyUserRepository(db_session)
    project_repo = SqlalchemyProjectRepository(db_session)
    membership_repo = SqlalchemyMembershipRepository(db_session)
    cluster_repo = SqlalchemyClusterRepository(db_session)
    addon_repo = SqlalchemyAddonRepository(db_session)

    authorization = AuthorizationService(membership_repo, project_repo)
    project_service = ProjectService(
        project_repo, membership_repo, cluster_repo, user_repo, authorization, settings=settings
    )
    return {
        'identity': IdentityService(user_repo),
        'projects': project_service,
        'clusters': ClusterService(cluster_repo, addon_repo, project_service, authorization),
    }

def make_application(session_factory=None, identity_provider=None, settings=None):
    if session_factory is None:
        from kubeplane.database.database import SessionLocal
        session_factory = SessionLocal
    identity_provider = identity_provider or HeaderIdentityProvider()
    routes = [
        ('GET', r'^/v1/projects$', list_projects_handler),
        ('POST', r'^/v1/projects$', create_project_handler),
        ('GET', r'^/v1/projects/([a-zA-Z0-9_-]+)$', get_project_handler),
        ('DELETE', r'^/v1/projects/([a-zA-Z0-9_-]+)$', delete_project_handler),
        ('GET', r'^/v1/projects/([a-zA-Z0-9_-]+)/members$', list_members_handler),
        ('PUT', r'^/v1/projects/([a-zA-Z0-9_-]+)/members/([^/]+)$', assign_member_handler),
        ('DELETE', r'^/v1/projects/([a-zA-Z0-9_-]+)/members/([^/]+)$', revoke_member_handler),
        ('GET', r'^/v1/projects/([a-zA-Z0-9_-]+)/clusters$', list_clusters_handler),
        ('GET', r'^/v1/projects/([a-zA-Z0-9_-]+)/clusters/([a-zA-Z0-9_-]+)$', get_cluster_handler),
    ]
    compiled_routes = [(m, re.compile(p), h) for m, p, h in routes]

    def application(environ, start_response):
        db_session = session_factory()
        try:
            # 1. 의존성 생성 (Repositories -> Services)
            services = build_services(db_session, settings)
            environ['services'] = services

            # 2. 라우팅
            path = environ.get("PATH_INFO", "")
            method = environ.get("REQUEST_METHOD", "")

            handler, path_args, path_matched = None, [], False
            for route_method, pattern, route_handler in compiled_routes:
                if match := pattern.match(path):
                    path_matched = True
                    if method == route_method:
                        handler, path_args = route_handler, match.groups()
                        break

            if handler:
                # 3. 인증된 사용자 확인 후 핸들러 실행
                identity = identity_provider.authenticate(environ)
                environ['user'] = services['identity'].ensure_user(identity.id, identity.email)
                status, response_body = handler(environ, *path_args)
            elif path_matched:
                status, response_body = STATUS_TEXT[405], error_body(405, 'Method Not Allowed')
            else:
                status, response_body = STATUS_TEXT[404], error_body(404, 'Not Found')

        except Exception as e:
            db_session.rollback()
            status, response_body = handle_exception(e)
        finally:
            db_session.close()

        logger.debug("%s %s -> %s", environ.get("REQUEST_METHOD"), environ.get("PATH_INFO"), status)
        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def list_projects_handler(environ, *args):
    projects = environ['services']['projects'].list_projects(environ['user'].id)
    return STATUS_TEXT[200], json.dumps([project_view(p) for p in projects])

def create_project_handler(environ, *args):
    data = get_request_data(environ)
    project = environ['services']['projects'].create_project(environ['user'].id, data.get('name'))
    return STATUS_TEXT[201], json.dumps(project_view(project))

def get_project_handler(environ, project_id):
    project = environ['services']['projects'].get_project(environ['user'].id, project_id)
    return STATUS_TEXT[200], json.dumps(project_view(project))

def delete_project_handler(environ, project_id):
    project = environ['services']['projects'].delete_project(environ['user'].id, project_id)
    return STATUS_TEXT[200], json.dumps(project_view(project))

def list_members_handler(environ, project_id):
    members = environ['services']['projects'].list_members(environ['user'].id, project_id)
    return STATUS_TEXT[200], json.dumps([member_view(m) for m in members])

def assign_member_handler(environ, project_id, member_id):
    data = get_request_data(environ)
    membership = environ['services']['projects'].assign_member(
        environ['user'].id, project_id, member_id, data.get('role')
    )
    return STATUS_TEXT[200], json.dumps(member_view(membership))

def revoke_member_handler(environ, project_id, member_id):
    environ['services']['projects'].revoke_member(environ['user'].id, project_id, member_id)
    return STATUS_TEXT[204], ''

def list_clusters_handler(environ, project_id):
    clusters = environ['services']['clusters'].list_clusters(environ['user'].id, project_id)
    return STATUS_TEXT[200], json.dumps([cluster_view(c) for c in clusters])

def get_cluster_handler(environ, project_id, cluster_id):
    cluster = environ['services']['clusters'].get_project_cluster(environ['user'].id, project_id, cluster_id)
    return STATUS_TEXT[200], json.dumps(cluster_view(cluster))

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

def main():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    application = make_application(settings=settings)
    try:
        with make_server(settings.host, settings.port, application) as httpd:
            logger.info("Serving kubeplane control plane on port %d...", settings.port)
            httpd.serve_forever()
    except Exception as e:
        logger.error("Error starting server: %s", e)
        sys.exit(1)

if __name__ == "__main__":
    main()
