"""
Exceções do PDV.

Todas seguem o padrão:
- code: código máquina do erro (ex.: "invalid_amount", "duplicate_sku")
- message: mensagem em português exibida ao usuário
- context: dados adicionais para o log
"""


class PDVError(Exception):
    """
    Classe base para os erros de negócio do PDV.
    """

    def __init__(self, code: str = "error", message: str = "", context: dict | None = None):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationError(PDVError):
    """
    Entrada inválida (valor negativo, taxa incoerente, código duplicado...).
    """


class NotFoundError(PDVError):
    """
    Registro não encontrado para a loja atual.
    """


class TenantError(PDVError):
    """
    Loja (company) não encontrada para o slug configurado.
    """
