# insights/constants.py
from datetime import datetime, timezone

from insights.models import DependsOn, Store, SurveyConfig, SurveyQuestion

DEFAULT_STORES = [
    Store(id="1", name="Atacadão Luiz Raphael"),
    Store(id="2", name="Centro Ravilla"),
]

GENDER_OPTIONS = ["Masculino", "Feminino"]

AGE_OPTIONS = [
    "Menos de 18",
    "18-24 anos",
    "25-34 anos",
    "35-44 anos",
    "45-54 anos",
    "55-64 anos",
    "65 anos ou mais",
]

BOOLEAN_OPTIONS = ["Sim", "Não"]

# Dashboard windows, in days
TIME_FILTERS = [7, 14, 30, 60]
DEFAULT_TIME_FILTER = 14

DEFAULT_NPS_SCORE = 10
HISTORY_LIMIT = 30

UNKNOWN_LABEL = "unknown"


def default_survey() -> SurveyConfig:
    return SurveyConfig(
        id="ci-001",
        name="Pesquisa de Performance no PDV",
        description="Auditoria de atendimento, mix de produtos e satisfação geral.",
        is_active=True,
        created_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        questions=[
            SurveyQuestion(
                id="q1",
                label="Conseguiu encontrar todos os produtos da sua lista?",
                type="boolean",
                required=True,
            ),
            SurveyQuestion(
                id="q1_d",
                label="Quais itens ou marcas não estavam disponíveis nas gôndolas?",
                type="text",
                required=True,
                depends_on=DependsOn(question_id="q1", value="Não"),
            ),
            SurveyQuestion(
                id="q2",
                label="Nota para a cordialidade e preparo da equipe:",
                type="rating",
                required=True,
            ),
            SurveyQuestion(
                id="q3",
                label="Sugestões para melhorar sua experiência de compra:",
                type="text",
                required=False,
            ),
        ],
    )
