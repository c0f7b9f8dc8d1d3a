from pymongo.results import UpdateResult


def update_result(acknowledged=True):
    return UpdateResult(
        {"n": 1, "nModified": 0, "upserted": "x"}, acknowledged=acknowledged
    )
