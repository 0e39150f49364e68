"""
Colaborador de navegação baseado em Playwright.
Abre a página do produto, repassa as respostas da API interna para a captura
e lê o material renderizado (HTML, scripts inline, estado global legado).
"""

from typing import Any, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    Response,
    TimeoutError as PlaywrightTimeout,
)
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config.logging_config import LoggerMixin
from config.settings import Settings, get_settings
from alimonitor.core.exceptions import FetchError, NetworkError
from alimonitor.pipeline.capture import ResponseCapture
from alimonitor.pipeline.document import PageSnapshot


# Script executado antes de qualquer código da página para esconder automação
STEALTH_INIT_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined,
    });

    window.chrome = {
        runtime: {},
    };

    Object.defineProperty(navigator, 'plugins', {
        get: () => [1, 2, 3, 4, 5],
    });

    Object.defineProperty(navigator, 'languages', {
        get: () => ['pt-BR', 'pt', 'en-US', 'en'],
    });
"""

# Leitura do estado global legado exposto pela página
GLOBAL_STATE_SCRIPT = """
    () => {
        try {
            const data = window.runParams && window.runParams.data;
            return data && Object.keys(data).length > 0 ? data : null;
        } catch (e) {
            return null;
        }
    }
"""

INLINE_SCRIPTS_SCRIPT = "elements => elements.map(e => e.textContent || '')"

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    "--window-size=1920,1080",
]


class PageFetcher(LoggerMixin):
    """
    Abre uma página de produto por vez.

    Uso:
        async with PageFetcher() as fetcher:
            capture = await fetcher.open(product_id)
            snapshot = await fetcher.snapshot()
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._capture: Optional[ResponseCapture] = None

    async def __aenter__(self) -> "PageFetcher":
        await self._init_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # =========================================================================
    # NAVEGAÇÃO
    # =========================================================================

    async def open(self, product_id: str) -> ResponseCapture:
        """
        Navega até a página do produto capturando as respostas da API.

        Args:
            product_id: ID numérico do produto

        Returns:
            ResponseCapture desta requisição, já encerrada após a carga

        Raises:
            NetworkError: Se a navegação falhar após as tentativas
        """
        url = self.settings.get_item_url(product_id)

        self._capture = ResponseCapture(
            url_markers=self.settings.api_url_markers,
            min_body_length=self.settings.min_api_body_length,
        )

        page = await self._create_page()
        page.on("response", self._on_response)

        self.logger.info("Abrindo página do produto", product_id=product_id, url=url)

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.settings.max_retries),
                wait=wait_exponential(multiplier=1, min=self.settings.retry_delay, max=10),
                retry=retry_if_exception_type((NetworkError, PlaywrightTimeout)),
                reraise=True,
            ):
                with attempt:
                    await self._navigate(page, url, product_id)
        except PlaywrightTimeout as e:
            self._capture.close()
            raise NetworkError(
                "Timeout ao carregar a página do produto",
                product_id=product_id,
                url=url,
                cause=e,
            ) from e
        except NetworkError:
            self._capture.close()
            raise
        except PlaywrightError as e:
            self._capture.close()
            raise FetchError(
                "Falha ao carregar a página do produto",
                product_id=product_id,
                url=url,
                cause=e,
            ) from e

        # Carga concluída: nenhuma resposta nova virá desta navegação
        self.logger.debug("Carga concluída, encerrando captura", captured=len(self._capture))
        self._capture.close()

        return self._capture

    async def _navigate(self, page: Page, url: str, product_id: str) -> None:
        self.logger.debug("Navegando para URL", url=url)

        response = await page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=self.settings.navigation_timeout,
        )

        if response and response.status >= 400:
            raise NetworkError(
                f"Status {response.status}",
                product_id=product_id,
                url=url,
                status_code=response.status,
            )

        try:
            await page.wait_for_load_state(
                "networkidle",
                timeout=self.settings.navigation_timeout,
            )
        except PlaywrightTimeout:
            self.logger.debug("Rede não ficou ociosa, continuando", url=url)

    async def _on_response(self, response: Response) -> None:
        """Repassa respostas candidatas para a captura."""
        capture = self._capture
        if capture is None or not capture.accepts_url(response.url):
            return

        try:
            body = await response.text()
        except PlaywrightError as e:
            self.logger.debug("Corpo da resposta indisponível", url=response.url[:120], error=str(e))
            return

        capture.add(response.url, body)

    # =========================================================================
    # LEITURA DA PÁGINA
    # =========================================================================

    async def snapshot(self) -> PageSnapshot:
        """
        Lê o material renderizado da página atual.

        Returns:
            PageSnapshot com HTML, scripts inline e estado global legado

        Raises:
            FetchError: Se a página não puder ser lida (ex: contexto destruído)
        """
        if self._page is None:
            return PageSnapshot()

        page = self._page

        try:
            html = await page.content()
            scripts = await page.eval_on_selector_all("script:not([src])", INLINE_SCRIPTS_SCRIPT)
        except PlaywrightError as e:
            raise FetchError("Falha ao ler a página renderizada", url=page.url, cause=e) from e

        global_state = await self._read_global_state(page)

        self.logger.debug(
            "Snapshot da página",
            html_size=len(html),
            scripts=len(scripts),
            has_global_state=global_state is not None,
        )

        return PageSnapshot.from_html(html, scripts=scripts, global_state=global_state)

    async def _read_global_state(self, page: Page) -> Optional[dict[str, Any]]:
        try:
            state = await page.evaluate(GLOBAL_STATE_SCRIPT)
        except PlaywrightError as e:
            self.logger.debug("Estado global indisponível", error=str(e))
            return None
        return state if isinstance(state, dict) else None

    # =========================================================================
    # GERENCIAMENTO DO BROWSER
    # =========================================================================

    async def _init_browser(self) -> None:
        """Inicializa o Playwright e o browser com configurações anti-detecção."""
        if self._browser is not None:
            return

        self._playwright = await async_playwright().start()

        self._browser = await self._playwright.chromium.launch(
            headless=self.settings.headless,
            executable_path=self.settings.browser_executable_path,
            args=LAUNCH_ARGS,
        )

        self._context = await self._browser.new_context(
            user_agent=self.settings.user_agent,
            viewport={"width": 1920, "height": 1080},
            locale="pt-BR",
            timezone_id="America/Sao_Paulo",
            extra_http_headers={
                "Accept-Language": self.settings.accept_language,
            },
        )

        await self._context.add_init_script(STEALTH_INIT_SCRIPT)

    async def _create_page(self) -> Page:
        """Cria nova página no contexto."""
        if self._context is None:
            await self._init_browser()

        if self._page is not None:
            await self._page.close()

        self._page = await self._context.new_page()
        self._page.set_default_timeout(self.settings.navigation_timeout)
        return self._page

    async def close(self) -> None:
        """Fecha browser e libera recursos."""
        if self._capture is not None:
            self._capture.close()
            self._capture = None

        if self._page:
            await self._page.close()
            self._page = None

        if self._context:
            await self._context.close()
            self._context = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
