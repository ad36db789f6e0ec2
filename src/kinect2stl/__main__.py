from kinect2stl.cli import app

app(prog_name="kinect2stl")
