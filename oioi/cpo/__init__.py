from oioi.shared.logging import _init_logger

_init_logger()
