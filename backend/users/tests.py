from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

User = get_user_model()


class TestUserManager(APITestCase):

    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email="Someone@EXAMPLE.com", password="testpass123")

        self.assertEqual(user.email, "Someone@example.com")
        self.assertTrue(user.check_password("testpass123"))
        self.assertFalse(user.is_staff)

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="testpass123")

    def test_create_superuser(self):
        admin = User.objects.create_superuser(email="admin@example.com", password="testpass123")

        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.is_superuser)


class TestAuthEndpoints(APITestCase):

    password = "Quiet-Harbor-42"

    def test_register_then_login(self):
        register = self.client.post(reverse("auth_register"), {
            "email": "new@example.com",
            "password": self.password,
            "password2": self.password,
        }, format="json")

        self.assertEqual(register.status_code, status.HTTP_201_CREATED)
        self.assertNotIn("password", register.data)

        login = self.client.post(reverse("token_obtain_pair"), {
            "email": "new@example.com",
            "password": self.password,
        }, format="json")

        self.assertEqual(login.status_code, status.HTTP_200_OK)
        self.assertIn("access", login.data)
        self.assertIn("refresh", login.data)

    def test_register_password_mismatch(self):
        response = self.client.post(reverse("auth_register"), {
            "email": "new@example.com",
            "password": self.password,
            "password2": "something-else-42",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", response.data)

    def test_login_with_wrong_password(self):
        User.objects.create_user(email="user@example.com", password=self.password)

        response = self.client.post(reverse("token_obtain_pair"), {
            "email": "user@example.com",
            "password": "wrong",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_user_detail_returns_actor(self):
        user = User.objects.create_user(email="user@example.com", password=self.password)
        self.client.force_authenticate(user=user)

        response = self.client.get(reverse("user_detail"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["email"], "user@example.com")
        self.assertEqual(str(response.data["id"]), str(user.pk))

    def test_user_detail_requires_token(self):
        response = self.client.get(reverse("user_detail"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
