from dishka import provide

from tenantauth.config import Config
from tenantauth.domain.user_role.port.token import TokenIssuer
from tenantauth.infrastructure.token.jwt_issuer import JwtTokenIssuer
from tenantauth.util.di.base import Provider
from tenantauth.util.di.scope import Scope


class TokenProvider(Provider):
    @provide(scope=Scope.APP)
    def get_jwt_issuer(self, config: Config) -> JwtTokenIssuer:
        return JwtTokenIssuer(config.auth.jwt)

    @provide(scope=Scope.APP)
    def get_token_issuer(self, issuer: JwtTokenIssuer) -> TokenIssuer:
        return issuer
