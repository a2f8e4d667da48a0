import logging.config

LOG_LEVEL = "INFO"
TRACE = logging.DEBUG - 5


def _init_logger(log_level: str = LOG_LEVEL):
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(log_level)

    # An extra logging level, used for the raw JSON bodies of the OIOI messages
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, message, args, **kwargs)

    level_name = "TRACE"
    logging.addLevelName(TRACE, level_name)
    setattr(logging, level_name, TRACE)
    setattr(logging.getLoggerClass(), level_name.lower(), trace)
