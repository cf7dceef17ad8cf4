from django.urls import path
from . import views

urlpatterns = [
    path('api/careplans/', views.create_care_plan, name='create_care_plan'),
    path('api/careplans/<int:pk>/', views.care_plan_detail, name='care_plan_detail'),
    path('api/careplans/<int:pk>/summary/', views.care_plan_summary, name='care_plan_summary'),
    path('api/careplans/<int:pk>/summary/download/', views.download_care_plan_summary,
         name='download_care_plan_summary'),
    path('api/careplans/<int:pk>/goals/', views.add_care_goal, name='add_care_goal'),
    path('api/careplans/<int:pk>/interventions/', views.add_intervention, name='add_intervention'),
    path('api/careplans/<int:pk>/barriers/', views.add_barrier, name='add_barrier'),
    path('api/careplans/<int:pk>/reviews/', views.care_plan_reviews, name='care_plan_reviews'),
    path('api/careplans/<int:pk>/team/', views.assign_care_team_member, name='assign_care_team_member'),
    path('api/goals/<int:pk>/', views.goal_detail, name='goal_detail'),
    path('api/goals/<int:pk>/progress/', views.record_goal_progress, name='record_goal_progress'),
    path('api/goals/<int:pk>/achieve/', views.mark_goal_achieved, name='mark_goal_achieved'),
    path('api/interventions/<int:pk>/', views.intervention_detail, name='intervention_detail'),
    path('api/barriers/<int:pk>/', views.barrier_detail, name='barrier_detail'),
    path('api/barriers/<int:pk>/resolve/', views.resolve_barrier, name='resolve_barrier'),
    path('api/reviews/<int:pk>/', views.review_detail, name='review_detail'),
    path('api/reviews/<int:pk>/conduct/', views.conduct_care_plan_review, name='conduct_care_plan_review'),
    path('api/patients/<str:patient_id>/careplans/', views.patient_care_plans, name='patient_care_plans'),
    path('metrics/', views.metrics, name='metrics'),
]
