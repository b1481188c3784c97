import azure.functions as func

from movietracker_recommendation_service.blueprints.tracker_bp import bp as tracker_bp

app = func.FunctionApp()

app.register_blueprint(tracker_bp)
