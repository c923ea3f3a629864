"""Constantes HTTP pour éviter les valeurs magiques dans le code.

Ce module définit les codes de statut HTTP utilisés par l'API et les valeurs par défaut de
pagination des listes.
"""

# Codes de statut HTTP courants
HTTP_OK = 200
HTTP_CREATED = 201
HTTP_NO_CONTENT = 204
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409
HTTP_UNPROCESSABLE_ENTITY = 422
HTTP_INTERNAL_SERVER_ERROR = 500
HTTP_BAD_GATEWAY = 502
HTTP_SERVICE_UNAVAILABLE = 503

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
TOTAL_COUNT_HEADER = "X-Total-Count"
