def Toolbar():
    return "<div><button>A</button><button>B</button></div>"
