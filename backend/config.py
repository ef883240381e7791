from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    registry_form_url: str = "https://busca.inpi.gov.br/pePI/jsp/marcas/Pesquisa_classe_basica.jsp"
    registry_search_url: str = "https://busca.inpi.gov.br/pePI/servlet/MarcasServletController"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    accept_language: str = "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7"

    request_timeout: float = 30.0
    max_redirects: int = 5
    session_refresh_interval: float = 15 * 60   # seconds
    captcha_max_attempts: int = 3
    captcha_retry_delay: float = 2.0            # seconds
    cache_ttl: float = 60 * 60                  # seconds

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 3001

    model_config = {"env_file": ".env"}


settings = Settings()
