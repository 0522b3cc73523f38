"""Authorization of the acting user against a document."""

import logging
from typing import Optional

from .context import WorkerContext
from .utils.errors import PermissionDeniedError

logger = logging.getLogger(__name__)


async def validate_document_permission(
    ctx: WorkerContext,
    document_id: str,
    user_id: Optional[str],
) -> str:
    """Ensure ``user_id`` has some access level on ``document_id``.

    Any access level (view included) is enough to process the document.

    Returns:
        The user's access level

    Raises:
        PermissionDeniedError: no user, an error from the metadata service,
            or no access level returned
    """
    metadata = {"document_id": document_id, "user_id": user_id}
    if not user_id:
        logger.error("no user to validate document permission for", extra=metadata)
        raise PermissionDeniedError(f"no user provided for document {document_id}")

    response = await ctx.document_storage.get_document_user_access_level(document_id, user_id)
    if response.error:
        logger.error(
            "unable to get user access level",
            extra={**metadata, "error_message": response.message},
        )
        raise PermissionDeniedError(f"user does not have access to document {document_id}")

    access_level = response.data.user_access_level if response.data else None
    if not access_level:
        logger.error("user has no access level", extra=metadata)
        raise PermissionDeniedError(f"user does not have access to document {document_id}")

    return access_level
