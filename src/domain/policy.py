from uuid import UUID

from src.domain.entities import Comment, Post


class PolicyEngine:
    """
    Ownership rules for the post aggregate.

    - delete/update a post: owner only
    - edit/delete a comment: its author only
    - like/bookmark: any identity (binding to the requester is decided at
      the HTTP edge by rules.engagement.bind_to_requester)
    """

    def can_modify_post(self, requester_id: UUID | None, post: Post) -> bool:
        return requester_id is not None and requester_id == post.owner_id

    def can_modify_comment(self, requester_id: UUID | None, comment: Comment) -> bool:
        return requester_id is not None and requester_id == comment.author_id

    def can_toggle_for(
        self, requester_id: UUID | None, target_user_id: UUID, bind_to_requester: bool
    ) -> bool:
        if not bind_to_requester:
            return True
        return requester_id is not None and requester_id == target_user_id

    def can_manage_user(self, requester_id: UUID | None, user_id: UUID) -> bool:
        return requester_id is not None and requester_id == user_id
