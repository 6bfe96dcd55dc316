from enum import Enum

class PlanType(str, Enum):
    FULL = "Full"
    SIMPLES = "Simples"

class NegotiationStatus(str, Enum):
    PENDING = "Pendente"
    APPROVED = "Aprovado Pricing"
    REJECTED = "Rejeitado"

class ApprovalTier(str, Enum):
    AUTOMATIC = "Alçada 1"   # spread at or above the auto-approval threshold
    MANAGERIAL = "Alçada 2"  # undercut, needs managerial sign-off

class RejectionReason(str, Enum):
    WRONG_EVIDENCE = "Evidência incorreta"
    INCOMPLETE_ATTACHMENTS = "Anexos incompletos"
    MARGIN_CALCULATION_ERROR = "Erro no cálculo de margem"
    RESEND_DATA = "Reenviar dados"
    OTHER = "Outros"

class LogAction(str, Enum):
    APPROVAL = "Aprovação"
    REJECTION = "Reprovação"
    RATE_EDIT = "Edição de Taxas"

class RecomputeTrigger(str, Enum):
    SPREAD_CHANGED = "SPREAD_CHANGED"
    RECORD_SWITCHED = "RECORD_SWITCHED"
    PLAN_CHANGED = "PLAN_CHANGED"
