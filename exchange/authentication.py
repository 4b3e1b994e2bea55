"""
Token authentication for the legacy ``Authorization: Token <key>`` header.

JWT is the primary scheme (``rest_framework_simplejwt``); this subclass
keeps a stable import path for the settings module.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    keyword = 'Token'
