def classnames(*names):
    return " ".join(n for n in names if n)
