SNAPSHOT_SCHEMA = {
    "context": ["sector", "region"],
    "berkusInputs": ["ideaValue", "prototypeValue", "teamValue", "relationshipsValue", "salesValue"],
    "scorecardInputs": [
        "marketAverage", "teamScore", "opportunityScore", "productScore",
        "competitionScore", "marketingScore", "investmentNeedScore", "otherScore"
    ],
    "vcInputs": ["exitRevenue", "exitMultiple", "requiredROI", "investmentAmount"],
    "riskFactorValuation": None,
    "costToDuplicateValuation": None,
}


def validate_snapshot(snapshot, expected_schema=SNAPSHOT_SCHEMA):
    """True when every section and nested key of the deal snapshot is present."""
    if not isinstance(snapshot, dict):
        return False
    for section, keys in expected_schema.items():
        if section not in snapshot:
            return False
        if keys is None:
            continue
        value = snapshot[section]
        if not isinstance(value, dict) or not all(key in value for key in keys):
            return False
    return True
