from typing import Literal

from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    A configuration key a client needs before it can talk to its backend.

    The key is given without its prefix; clients expand it to e.g. "LLM_GEMINI_BASE_URL".

    Attributes:
        env_key (str): Unprefixed name of the environment variable (e.g. "BASE_URL").
        val_type (str): How the value is parsed: "string", "number" or "bool".
        default (str | int | float | bool | None): Used when the variable is unset. None makes the key mandatory.
    """

    env_key: str
    val_type: Literal["string", "number", "bool"] = "string"
    default: str | int | float | bool | None = None
