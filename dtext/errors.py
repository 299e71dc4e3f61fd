class DTextError(Exception):
    pass


class NestingError(DTextError):
    def __init__(self, msg: str = "too many nested elements"):
        super().__init__(msg)
