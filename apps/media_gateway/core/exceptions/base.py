"""게이트웨이 예외 기반 클래스."""


class GatewayError(Exception):
    """HTTP 응답으로 변환되는 도메인 예외.

    서브클래스는 ``status_code`` 와 ``code`` 만 지정합니다.
    """

    status_code: int = 400
    code: str = "BAD_REQUEST"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)
