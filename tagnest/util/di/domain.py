"""Domain layer DI providers."""

from dishka import Scope, provide

from tagnest.config import TaggingSettings
from tagnest.domain.repository import TagRepository, TaggedRepository
from tagnest.domain.service import (
    ClosureService,
    TagBatchService,
    TaggableService,
    TagService,
)
from tagnest.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide
    def get_tag_service(
        self, tag_repository: TagRepository, tagged_repository: TaggedRepository
    ) -> TagService:
        """Provide tag registry service."""
        return TagService(
            tag_repository=tag_repository, tagged_repository=tagged_repository
        )

    @provide
    def get_closure_service(
        self, tagged_repository: TaggedRepository, tagging_settings: TaggingSettings
    ) -> ClosureService:
        """Provide nested tag closure service."""
        return ClosureService(
            tagged_repository=tagged_repository, tagging_settings=tagging_settings
        )

    @provide
    def get_taggable_service(
        self,
        tag_service: TagService,
        closure_service: ClosureService,
        tag_repository: TagRepository,
        tagged_repository: TaggedRepository,
    ) -> TaggableService:
        """Provide tag query service."""
        return TaggableService(
            tag_service=tag_service,
            closure_service=closure_service,
            tag_repository=tag_repository,
            tagged_repository=tagged_repository,
        )

    @provide
    def get_tag_batch_service(
        self,
        tag_service: TagService,
        tag_repository: TagRepository,
        tagged_repository: TaggedRepository,
    ) -> TagBatchService:
        """Provide batch tag loading service."""
        return TagBatchService(
            tag_service=tag_service,
            tag_repository=tag_repository,
            tagged_repository=tagged_repository,
        )
