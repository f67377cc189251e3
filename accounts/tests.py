from django.contrib.auth.models import User
from django.test import TestCase, Client as HttpClient
from django.urls import reverse

from .decorators import get_client, get_owner
from .forms import OwnerSignUpForm, ClientSignUpForm
from .models import Owner, Client


OWNER_DATA = {
    "email": "Maria@Arena.com",
    "password": "secret123",
    "name": "Maria",
    "establishment_name": "Arena Central",
    "phone": "19999990000",
    "city": "Campinas",
    "court_count": "3",
}

CLIENT_DATA = {
    "email": "joao@example.com",
    "password": "secret123",
    "first_name": "Joao",
    "last_name": "Silva",
}


class SignUpFormTests(TestCase):
    def test_owner_form_creates_user_and_profile(self):
        form = OwnerSignUpForm(OWNER_DATA)
        self.assertTrue(form.is_valid(), form.errors)
        owner = form.save()
        self.assertEqual(owner.user.username, "maria@arena.com")
        self.assertEqual(owner.email, "maria@arena.com")
        self.assertEqual(owner.court_count, 3)
        self.assertEqual(owner.plan_type, "monthly")
        self.assertTrue(owner.user.check_password("secret123"))

    def test_owner_form_validation(self):
        cases = [
            {"phone": "123"},
            {"court_count": "0"},
            {"password": "abc"},
            {"email": "not-an-email"},
            {"establishment_name": ""},
        ]
        for override in cases:
            with self.subTest(override=override):
                form = OwnerSignUpForm({**OWNER_DATA, **override})
                self.assertFalse(form.is_valid())
                self.assertIn(next(iter(override)), form.errors)

    def test_duplicate_email_rejected_case_insensitively(self):
        User.objects.create_user(username="maria@arena.com", password="x")
        form = OwnerSignUpForm(OWNER_DATA)
        self.assertFalse(form.is_valid())
        self.assertIn("already in use", form.errors["email"][0])

    def test_client_form_phone_optional(self):
        form = ClientSignUpForm(CLIENT_DATA)
        self.assertTrue(form.is_valid(), form.errors)
        client = form.save()
        self.assertEqual(client.full_name, "Joao Silva")
        self.assertEqual(client.phone, "")


class AccountViewTests(TestCase):
    def setUp(self):
        self.http = HttpClient()

    def test_owner_signup_logs_in(self):
        res = self.http.post(reverse("accounts:signup_owner"), OWNER_DATA)
        self.assertEqual(res.status_code, 201)
        body = res.json()
        self.assertTrue(body["ok"])
        self.assertEqual(body["redirect"], reverse("dashboard:summary"))
        self.assertTrue(Owner.objects.filter(pk=body["id"]).exists())
        self.assertIn("_auth_user_id", self.http.session)

    def test_owner_signup_errors(self):
        res = self.http.post(reverse("accounts:signup_owner"), {**OWNER_DATA, "phone": "1"})
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["ok"])
        self.assertIn("phone", res.json()["errors"])
        self.assertFalse(User.objects.exists())

    def test_signup_requires_post(self):
        res = self.http.get(reverse("accounts:signup_owner"))
        self.assertEqual(res.status_code, 405)

    def test_client_signup_follows_next(self):
        res = self.http.post(reverse("accounts:signup_client"), {**CLIENT_DATA, "next": "/booking/mine/"})
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["redirect"], "/booking/mine/")
        self.assertTrue(Client.objects.filter(email="joao@example.com").exists())

    def test_client_signup_ignores_foreign_next(self):
        res = self.http.post(reverse("accounts:signup_client"), {**CLIENT_DATA, "next": "https://evil.example.com/"})
        self.assertEqual(res.json()["redirect"], "/")

    def test_login_owner_goes_to_dashboard(self):
        form = OwnerSignUpForm(OWNER_DATA)
        form.is_valid()
        form.save()
        res = self.http.post(reverse("accounts:login"), {"email": "MARIA@arena.com", "password": "secret123"})
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["role"], "owner")
        self.assertEqual(body["redirect"], reverse("dashboard:summary"))

    def test_login_client(self):
        form = ClientSignUpForm(CLIENT_DATA)
        form.is_valid()
        form.save()
        res = self.http.post(reverse("accounts:login"), {"email": "joao@example.com", "password": "secret123"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["role"], "client")
        self.assertEqual(res.json()["redirect"], "/")

    def test_login_wrong_password(self):
        User.objects.create_user(username="joao@example.com", email="joao@example.com", password="secret123")
        res = self.http.post(reverse("accounts:login"), {"email": "joao@example.com", "password": "nope"})
        self.assertEqual(res.status_code, 400)
        self.assertFalse(res.json()["ok"])
        self.assertNotIn("_auth_user_id", self.http.session)

    def test_logout(self):
        user = User.objects.create_user(username="joao@example.com", password="secret123")
        self.http.force_login(user)
        res = self.http.post(reverse("accounts:logout"))
        self.assertEqual(res.json(), {"ok": True, "redirect": "/"})
        self.assertNotIn("_auth_user_id", self.http.session)


class ProfileLookupTests(TestCase):
    def test_profiles_resolved_by_role(self):
        form = ClientSignUpForm(CLIENT_DATA)
        form.is_valid()
        client = form.save()
        self.assertEqual(get_client(client.user), client)
        self.assertIsNone(get_owner(client.user))

    def test_dashboard_guard(self):
        http = HttpClient()
        self.assertEqual(http.get(reverse("dashboard:summary")).status_code, 401)

        form = ClientSignUpForm(CLIENT_DATA)
        form.is_valid()
        http.force_login(form.save().user)
        res = http.get(reverse("dashboard:summary"))
        self.assertEqual(res.status_code, 403)
        self.assertEqual(res.json()["detail"], "Owner account required.")
