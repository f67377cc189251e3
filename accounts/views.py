import logging

from django.contrib.auth import login, logout
from django.http import JsonResponse
from django.urls import reverse, NoReverseMatch
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from .decorators import get_owner
from .forms import OwnerSignUpForm, ClientSignUpForm, EmailLoginForm, error_dict

logger = logging.getLogger(__name__)


def _dashboard_url():
    try:
        return reverse("dashboard:summary")
    except NoReverseMatch:
        return "/dashboard/"


def _safe_next(request, default="/"):
    target = request.POST.get("next") or request.GET.get("next")
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}, require_https=request.is_secure()):
        return target
    return default


@require_POST
def signup_owner(request):
    form = OwnerSignUpForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"ok": False, "errors": error_dict(form)}, status=400)

    owner = form.save()
    login(request, owner.user)
    logger.info("Owner %s signed up for establishment %r", owner.id, owner.establishment_name)
    return JsonResponse({
        "ok": True,
        "id": str(owner.id),
        "redirect": _dashboard_url(),
    }, status=201)


@require_POST
def signup_client(request):
    form = ClientSignUpForm(request.POST)
    if not form.is_valid():
        return JsonResponse({"ok": False, "errors": error_dict(form)}, status=400)

    client = form.save()
    login(request, client.user)
    logger.info("Client %s signed up", client.id)
    return JsonResponse({
        "ok": True,
        "id": str(client.id),
        "redirect": _safe_next(request),
    }, status=201)


@require_POST
def login_ajax(request):
    form = EmailLoginForm(request, data=request.POST)
    if not form.is_valid():
        logger.warning("Failed login for %r", request.POST.get("email"))
        return JsonResponse({"ok": False, "errors": error_dict(form)}, status=400)

    user = form.get_user()
    login(request, user)

    if get_owner(user) is not None:
        role, redirect_to = "owner", _dashboard_url()
    else:
        role, redirect_to = "client", _safe_next(request)

    return JsonResponse({
        "ok": True,
        "email": user.email,
        "role": role,
        "redirect": redirect_to,
    })


@require_POST
def logout_ajax(request):
    logout(request)
    return JsonResponse({"ok": True, "redirect": "/"})
