from . import user, section, application  # noqa: F401  register mappers with Base
