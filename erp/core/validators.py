import re

from django.core.exceptions import ValidationError


class PasswordComplexityValidator:
    """Require at least one uppercase letter, one lowercase letter and one digit."""

    def validate(self, password, user=None):
        if not re.search(r'[A-Z]', password or ''):
            raise ValidationError('Password must contain at least one uppercase letter.', code='password_no_upper')
        if not re.search(r'[a-z]', password or ''):
            raise ValidationError('Password must contain at least one lowercase letter.', code='password_no_lower')
        if not re.search(r'\d', password or ''):
            raise ValidationError('Password must contain at least one digit.', code='password_no_digit')

    def get_help_text(self):
        return 'Your password must contain an uppercase letter, a lowercase letter and a digit.'
