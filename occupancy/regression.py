import logging

import pandas as pd
import statsmodels.api as sm

from occupancy.exc import RegressionError

logger = logging.getLogger(__name__)

RESPONSE = "icu_occupied"
PREDICTORS = ["covid_occupied", "inpatient_occupied", "days"]


def regression_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rows with the response and every predictor defined. The date enters the
    model as the number of days since the first date in ``df``.
    """
    frame = df[["date", RESPONSE, "covid_occupied", "inpatient_occupied"]].copy()
    frame["days"] = (frame["date"] - frame["date"].min()).dt.days.astype(float)
    return frame.dropna(subset=[RESPONSE] + PREDICTORS)


def fit_icu_regression(df: pd.DataFrame):
    """
    Ordinary least squares of occupied ICU beds on occupied covid beds,
    occupied inpatient beds and date, with an intercept.

    Parameters
    ----------
    df
        the cleaned per region and date table

    Returns
    -------
    The fitted ``statsmodels`` regression results
    """
    frame = regression_frame(df)
    n_parameters = len(PREDICTORS) + 1
    if len(frame) <= n_parameters:
        raise RegressionError(
            f"Need more than {n_parameters} complete rows to fit, got {len(frame)}"
        )
    exog = sm.add_constant(frame[PREDICTORS], has_constant="add")
    results = sm.OLS(frame[RESPONSE], exog).fit()
    logger.info(
        f"Fitted ICU regression on {int(results.nobs)} rows, "
        f"R^2 = {results.rsquared:.3f}"
    )
    return results
