from typing import Optional

import environs


class SettingKey:
    MESSAGE_LOG_JSON = "MESSAGE_LOG_JSON"


shared_settings = {SettingKey.MESSAGE_LOG_JSON: True}


def load_shared_settings(env_path: Optional[str] = None):
    env = environs.Env(eager=False)
    env.read_env(path=env_path)  # read .env file, if it exists

    settings = {
        SettingKey.MESSAGE_LOG_JSON: env.bool("MESSAGE_LOG_JSON", default=True),
    }
    shared_settings.update(settings)
    env.seal()  # raise all errors at once, if any
