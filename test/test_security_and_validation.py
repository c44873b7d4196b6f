import unittest

from streamtv.utils.security import generate_salt, hash_password, verify_password
from streamtv.validation import FieldError, validate_login, validate_registration


class TestPasswordHashing(unittest.TestCase):
    def test_hash_is_salted(self):
        a, b = generate_salt(), generate_salt()
        self.assertNotEqual(a, b)
        self.assertEqual(len(a), 32)
        self.assertNotEqual(hash_password("secret123", a), hash_password("secret123", b))

    def test_password_never_stored_in_plaintext(self):
        salt = generate_salt()
        self.assertNotIn("secret123", hash_password("secret123", salt))

    def test_verify_password(self):
        salt = generate_salt()
        stored = hash_password("secret123", salt)
        self.assertTrue(verify_password("secret123", salt, stored))
        self.assertFalse(verify_password("secret124", salt, stored))
        self.assertFalse(verify_password("secret123", generate_salt(), stored))


class TestValidation(unittest.TestCase):
    def _form(self, **overrides):
        form = dict(
            username="alice01",
            password="secret123",
            confirm_password="secret123",
            first_name="Alice",
            last_name="Smith",
            email="alice@example.com",
            payment_token="tok_4242",
        )
        form.update(overrides)
        return form

    def test_valid_registration(self):
        self.assertEqual(validate_registration(**self._form()), [])

    def test_short_username_and_password(self):
        errors = validate_registration(**self._form(username="abc", password="1234", confirm_password="1234"))
        self.assertEqual([e.field for e in errors], ["username", "password"])

    def test_password_confirmation_must_match(self):
        errors = validate_registration(**self._form(confirm_password="secret124"))
        self.assertEqual(errors, [FieldError("confirm_password", "Password and Verify Password must match")])

    def test_blank_fields_are_all_reported(self):
        errors = validate_registration(**self._form(
            first_name=" ", last_name="", email="not-an-email", payment_token=None))
        self.assertEqual(
            [e.field for e in errors], ["first_name", "last_name", "email", "payment_token"])

    def test_blank_email_is_rejected(self):
        for email in ("", "   ", None):
            errors = validate_registration(**self._form(email=email))
            self.assertEqual([(e.field, e.message) for e in errors],
                             [("email", "A valid Email is required")])

    def test_login_requires_both_fields(self):
        self.assertEqual(validate_login("alice01", "secret123"), [])
        self.assertEqual([e.field for e in validate_login("", "  ")], ["username", "password"])


if __name__ == "__main__":
    unittest.main()
