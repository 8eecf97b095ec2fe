from fastapi import status

from crm_service.libs.result import Error


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        clear_auth_cookie: bool = False,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.clear_auth_cookie = clear_auth_cookie
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)
