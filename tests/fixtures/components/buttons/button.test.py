from button import render

LABEL = "Disabled"


def Primary():
    return render("Primary")


def Disabled():
    return render(LABEL, disabled=True)
