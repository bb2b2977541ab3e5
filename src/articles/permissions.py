"""Object-level permission restricting articles to their author."""

from rest_framework import permissions

ACTION_VERBS = {
    "GET": "access",
    "HEAD": "access",
    "OPTIONS": "access",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}


class IsArticleAuthor(permissions.BasePermission):
    """Allow object access only to the article's author.

    The check is a plain comparison between ``obj.author_id`` and the session
    user; list/create requests are left to the view (which scopes list
    results to the caller and stamps the caller as author on create).
    """

    message = "You don't have permission to access this article"

    def has_object_permission(self, request, view, obj) -> bool:
        if self._is_owner(obj, request):
            return True
        self.message = f"You don't have permission to {ACTION_VERBS.get(request.method, 'access')} this article"
        return False

    @staticmethod
    def _is_owner(obj, request) -> bool:
        user = getattr(request, "user", None)
        return bool(user and getattr(user, "is_authenticated", False) and obj.author_id == user.pk)


__all__ = ["IsArticleAuthor"]
