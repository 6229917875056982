"""Tabular export of submissions for the dashboard download."""
from typing import Sequence

import pandas as pd

from insights.constants import UNKNOWN_LABEL
from insights.models import Store, SurveyConfig, SurveySubmission

BASE_COLUMNS = ["id", "timestamp", "store", "survey", "customer_name", "gender", "age_range", "nps_score"]


def submissions_frame(submissions: Sequence[SurveySubmission],
                      stores: Sequence[Store],
                      surveys: Sequence[SurveyConfig]) -> pd.DataFrame:
    """One row per submission; answers become one column per question id."""
    store_names = {s.id: s.name for s in stores}
    survey_names = {s.id: s.name for s in surveys}
    rows = []
    for sub in submissions:
        row = {
            "id": sub.id,
            "timestamp": sub.timestamp,
            "store": store_names.get(sub.store_id, UNKNOWN_LABEL),
            "survey": survey_names.get(sub.survey_id, UNKNOWN_LABEL),
            "customer_name": sub.customer_name,
            "gender": sub.gender,
            "age_range": sub.age_range,
            "nps_score": sub.nps_score,
        }
        row.update({f"answer_{qid}": value for qid, value in sub.answers.items()})
        rows.append(row)

    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=BASE_COLUMNS)
    answer_cols = sorted(c for c in df.columns if c not in BASE_COLUMNS)
    return df[BASE_COLUMNS + answer_cols]


def submissions_csv(submissions: Sequence[SurveySubmission],
                    stores: Sequence[Store],
                    surveys: Sequence[SurveyConfig]) -> str:
    return submissions_frame(submissions, stores, surveys).to_csv(index=False)
