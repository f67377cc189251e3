from functools import wraps

from django.http import JsonResponse

from .models import Owner, Client


def _profile(user, attr):
    try:
        return getattr(user, attr)
    except (Owner.DoesNotExist, Client.DoesNotExist):
        return None


def get_owner(user):
    if not user.is_authenticated:
        return None
    return _profile(user, "owner_profile")


def get_client(user):
    if not user.is_authenticated:
        return None
    return _profile(user, "client_profile")


def owner_required(view_func):
    """
    Decorator: requires a logged-in user with an owner profile.
    The profile is attached to the request as ``request.owner``.
    """
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({"detail": "Authentication required."}, status=401)
        owner = get_owner(request.user)
        if owner is None:
            return JsonResponse({"detail": "Owner account required."}, status=403)
        request.owner = owner
        return view_func(request, *args, **kwargs)
    return _wrapped_view
