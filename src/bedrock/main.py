"""Application entry point and composition root."""

import logging

import falcon
import falcon.asgi

from bedrock import __version__
from bedrock.application.use_cases.decision.evaluate_decision import EvaluateDecisionUseCase
from bedrock.config import Settings, get_settings
from bedrock.domain.services import CollectionMatcher
from bedrock.infrastructure.evaluation import (
    ResourceHierarchyWalker,
    ResourcePolicyEvaluator,
    ScopeRoleResolver,
)
from bedrock.infrastructure.persistence.postgres.connection import create_pool
from bedrock.infrastructure.persistence.postgres.unit_of_work import (
    create_uow_factory,
)
from bedrock.interfaces.api.middleware.cors import CORSMiddleware
from bedrock.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from bedrock.interfaces.api.resources.decisions import DecisionsResource
from bedrock.interfaces.api.resources.health import HealthResource

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging once, from settings."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_evaluate_decision(uow_factory, settings: Settings) -> EvaluateDecisionUseCase:
    """Wire the decision engine and its evaluation components."""
    matcher = CollectionMatcher(
        max_depth=settings.max_match_depth,
        condition_max_depth=settings.max_condition_depth,
    )
    return EvaluateDecisionUseCase(
        unit_of_work_factory=uow_factory,
        policy_evaluator=ResourcePolicyEvaluator(
            matcher, condition_max_depth=settings.max_condition_depth
        ),
        hierarchy_walker=ResourceHierarchyWalker(max_depth=settings.max_hierarchy_depth),
        role_resolver=ScopeRoleResolver(
            max_scope_depth=settings.max_scope_depth,
            condition_max_depth=settings.max_condition_depth,
        ),
        max_scope_depth=settings.max_scope_depth,
        enforce_scope_association=settings.enforce_scope_association,
    )


def main() -> None:
    """CLI entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Bedrock v%s (%s)", __version__, settings.environment)
    run_server()


def create_bedrock_app() -> falcon.asgi.App:
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    pool = create_pool(
        settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        acquire_timeout=settings.pool_acquire_timeout,
        statement_timeout_ms=settings.statement_timeout_ms,
    )
    uow_factory = create_uow_factory(pool)

    decisions_resource = DecisionsResource(build_evaluate_decision(uow_factory, settings))
    health_resource = HealthResource(pool)

    cors_origins = [
        o.strip() for o in settings.cors_origins.split(",") if o.strip()
    ]
    app = falcon.asgi.App(
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(pool, wait_timeout=settings.pool_startup_wait),
        ],
    )

    async def log_exception(req, resp, ex, params):
        if isinstance(ex, falcon.HTTPError):
            raise ex
        logger.exception("Unhandled error on %s %s", req.method, req.path)
        resp.status = falcon.HTTP_500
        resp.media = {"title": "500 Internal Server Error"}

    app.add_error_handler(Exception, log_exception)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/decisions", decisions_resource)

    return app


def run_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run uvicorn server."""
    import uvicorn

    settings = get_settings()
    app = create_bedrock_app()
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
