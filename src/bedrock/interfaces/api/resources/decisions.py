"""Decisions API resource."""

import logging
from typing import Any
from uuid import UUID

import falcon.asgi

from bedrock.application.dto.decision_dto import EvaluationInput, ResourceRef
from bedrock.application.use_cases.decision.evaluate_decision import EvaluateDecisionUseCase
from bedrock.domain.exceptions import (
    BedrockError,
    IntegrityError,
    NotFound,
    StoreUnavailable,
    ValidationError,
)

logger = logging.getLogger(__name__)


class DecisionsResource:
    """POST /v1/decisions - evaluate one authorization request."""

    def __init__(self, evaluate_decision: EvaluateDecisionUseCase) -> None:
        self._evaluate = evaluate_decision

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Evaluate actor, action, scope and optional resource; return the decision."""
        try:
            body = await req.get_media()
            input_data = parse_evaluation_input(body)
        except (falcon.MediaNotFoundError, falcon.MediaMalformedError):
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Invalid JSON body"}
            return
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return

        try:
            decision = await self._evaluate.execute(input_data)
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}
            return
        except IntegrityError as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}
            return
        except StoreUnavailable:
            resp.status = falcon.HTTP_503
            resp.media = {"error": "Store unavailable"}
            return
        except BedrockError as e:
            logger.error("Decision failed: %s", e)
            resp.status = falcon.HTTP_500
            resp.media = {"error": "Decision failed"}
            return

        resp.media = decision.to_dict()
        resp.status = falcon.HTTP_200


def parse_evaluation_input(body: Any) -> EvaluationInput:
    """Build EvaluationInput from a JSON body. Raises ValidationError."""
    if not isinstance(body, dict):
        raise ValidationError("Body must be a JSON object")

    actor = body.get("actor")
    action = body.get("action")
    if not isinstance(actor, str) or not actor:
        raise ValidationError("Missing required field: actor")
    if not isinstance(action, str) or not action:
        raise ValidationError("Missing required field: action")
    scope_id = _parse_uuid(body.get("scope_id"), "scope_id")

    context = body.get("context") or {}
    if not isinstance(context, dict):
        raise ValidationError("context must be an object")

    on_behalf_of = body.get("on_behalf_of")
    if on_behalf_of is not None and (not isinstance(on_behalf_of, str) or not on_behalf_of):
        raise ValidationError("on_behalf_of must be a non-empty string")

    resource = None
    raw_resource = body.get("resource")
    if raw_resource is not None:
        if not isinstance(raw_resource, dict):
            raise ValidationError("resource must be an object")
        resource_type_id = raw_resource.get("resource_type_id")
        if not isinstance(resource_type_id, str) or not resource_type_id:
            raise ValidationError("Missing required field: resource.resource_type_id")
        external_id = raw_resource.get("external_id")
        raw_id = raw_resource.get("id")
        if raw_id is None and not external_id:
            raise ValidationError("resource needs an id or an external_id")
        if external_id is not None and not isinstance(external_id, str):
            raise ValidationError("resource.external_id must be a string")
        resource = ResourceRef(
            resource_type_id=resource_type_id,
            external_id=external_id,
            id=_parse_uuid(raw_id, "resource.id") if raw_id is not None else None,
        )

    return EvaluationInput(
        actor=actor,
        action=action,
        scope_id=scope_id,
        resource=resource,
        context=context,
        on_behalf_of=on_behalf_of,
    )


def _parse_uuid(value: Any, field: str) -> UUID:
    if value is None:
        raise ValidationError(f"Missing required field: {field}")
    try:
        return UUID(str(value))
    except ValueError as e:
        raise ValidationError(f"Invalid {field}") from e
