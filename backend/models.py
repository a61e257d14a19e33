from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

class QuizQuestion(db.Model):
    __tablename__ = "quiz_questions"
    id = db.Column(db.Integer, primary_key=True)
    text = db.Column(db.Text)
    choices = db.Column(db.JSON)
    weight_map = db.Column(db.JSON)
    active = db.Column(db.Boolean, nullable=False, default=False)

class College(db.Model):
    __tablename__ = "college"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200))
    district = db.Column(db.String(120))
    contact = db.Column(db.String(120))
    website = db.Column(db.Text)
    lat = db.Column(db.Float)
    lng = db.Column(db.Float)
    verified = db.Column(db.Boolean, nullable=False, default=False)

class Resource(db.Model):
    __tablename__ = "resources"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200))
    source = db.Column(db.String(200))
    link = db.Column(db.Text)
    type = db.Column(db.String(40))
    tags = db.Column(db.JSON)

class Timeline(db.Model):
    __tablename__ = "timelines"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200))
    start_date = db.Column(db.String(40))
    end_date = db.Column(db.String(40))
    target_streams = db.Column(db.JSON)
    target_colleges = db.Column(db.JSON)
    message = db.Column(db.Text)

class CareerNode(db.Model):
    __tablename__ = "career_nodes"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200))
    description = db.Column(db.Text)
    skills = db.Column(db.JSON)
    salary_range = db.Column(db.String(120))
    related_courses = db.Column(db.JSON)
    related_exams = db.Column(db.JSON)

class AdminUser(db.Model):
    __tablename__ = "admin_users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True)
    role = db.Column(db.String(40), default="content-editor")

class Profile(db.Model):
    __tablename__ = "profiles"
    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(200))
    email = db.Column(db.String(255), unique=True, nullable=False)
    phone = db.Column(db.String(30))
    city = db.Column(db.String(120))
    education_level = db.Column(db.String(80))
    school_name = db.Column(db.String(200))
    percentage_scored = db.Column(db.Float)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow)

class AnalyticsEvent(db.Model):
    __tablename__ = "analytics"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128))
    event = db.Column(db.String(120))
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)
