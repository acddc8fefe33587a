from flask import current_app, request


def page_args():
    page = request.args.get('page', default=1, type=int)
    per_page = request.args.get('per_page', default=current_app.config.get('PAGE_SIZE', 20), type=int)
    per_page = max(1, min(per_page, current_app.config.get('MAX_PAGE_SIZE', 100)))
    return max(1, page), per_page


def paginate(query, serialize=lambda x: x.to_dict()):
    """Run a Flask-SQLAlchemy paginate() and wrap it in the single listing shape."""
    page, per_page = page_args()
    p = query.paginate(page=page, per_page=per_page, error_out=False)
    return {
        "items": [serialize(x) for x in p.items],
        "pagination": {
            "page": p.page,
            "per_page": p.per_page,
            "total": p.total,
            "pages": p.pages,
        },
    }
