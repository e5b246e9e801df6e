class FetchError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class HTTPStatusError(FetchError):
    def __init__(self, url: str, status_code: int):
        super().__init__(f"HTTP {status_code} from {url}")
        self.url = url
        self.status_code = status_code
