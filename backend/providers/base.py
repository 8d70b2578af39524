from abc import ABC, abstractmethod


class BaseProvider(ABC):
    """A chat-completion backend the food analysis cascade can ask for macro estimates."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def chat(self, messages: list[dict], model: str | None = None) -> dict:
        """
        Send one chat completion request. Never raises for remote failures.

        Returns:
            dict with keys:
                - text: str | None  (raw reply, expected to contain a JSON object)
                - provider: str
                - model: str
                - status: "success" | "failed"
                - error: str | None
        """
        ...

    def result(self, model: str, text: str | None = None, error: str | None = None) -> dict:
        return {
            "text": text,
            "provider": self.name,
            "model": model,
            "status": "failed" if error else "success",
            "error": error,
        }
