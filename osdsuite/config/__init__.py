"""Module which initializes Dynaconf"""

from dynaconf import Dynaconf, Validator


# pylint: disable=too-few-public-methods
class DefaultValueValidator(Validator):
    """Validator which will run default function only when the original value is missing"""

    def __init__(self, name, default, **kwargs) -> None:
        super().__init__(
            name,
            ne=None,
            messages={
                "operations": (
                    "{name} must {operation} {op_value} but it is {value} in env {env}. "
                    "You might be missing configuration for the cluster under test."
                )
            },
            default=default,
            when=Validator(name, must_exist=False) | Validator(name, eq=None),
            **kwargs
        )


settings = Dynaconf(
    environments=True,
    lowercase_read=True,
    load_dotenv=True,
    settings_files=["config/settings.yaml", "config/secrets.yaml"],
    envvar_prefix="OSD",
    merge_enabled=True,
    validators=[
        Validator("cluster.id", must_exist=True, ne=None),
        DefaultValueValidator("proxy.https_proxy", default="", cast=str),
        DefaultValueValidator("proxy.http_proxy", default="", cast=str),
        DefaultValueValidator("proxy.user_ca_bundle", default="", cast=str),
        DefaultValueValidator("tests.polling_timeout", default=300, cast=float, gt=0),
        DefaultValueValidator("dvo.namespace", default="osde2e-deployment-validation-operator"),
        DefaultValueValidator("dvo.package", default="deployment-validation-operator"),
        DefaultValueValidator("dvo.channel", default="alpha"),
        DefaultValueValidator("dvo.catalog_source", default="community-operators"),
        DefaultValueValidator("dvo.catalog_namespace", default="openshift-marketplace"),
    ],
    validate_only=["proxy", "tests", "dvo"],
    loaders=["dynaconf.loaders.env_loader", "osdsuite.config.openshift_loader"],
)
